"""
Snapshot Validation and Migration

Every snapshot that enters the ledger, whether a user backup or the
blob read back from storage, goes through the same staged pipeline:

STAGE 1 - SHAPE:
- Payload is a JSON object
- `wallets` and `transactions` collections are present and are lists

STAGE 2 - VERSION:
- A missing `version` marks a legacy (v0) blob, which is upgraded
- Versions newer than this code understands are rejected

STAGE 3 - MODELS:
- Every record validates against the pydantic models

STAGE 4 - REFERENCES:
- Ids are unique, budget categories are unique
- Transactions only reference wallets present in the snapshot

Validation never fills in missing data silently; the only defaults
applied are the explicit ones of a version upgrade.
"""

import json
from collections import Counter
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from pocketledger.errors import InvalidBackup
from pocketledger.models.ledger import SNAPSHOT_VERSION, LedgerSnapshot


class SnapshotIssue(BaseModel):
    """A single problem found while loading a snapshot."""

    field: str = Field(
        ...,
        description="Location of the problem (e.g. 'transactions.3.amount')"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g. 'missing', 'unsupported_version', 'unknown_wallet')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


def _upgrade_v0_to_v1(data: dict) -> dict:
    """
    v0 is the unversioned blob written by the first mobile release.

    It may lack `budgets` and `liabilities`; both start empty.
    """
    upgraded = dict(data)
    upgraded.setdefault("budgets", [])
    upgraded.setdefault("liabilities", [])
    upgraded["version"] = 1
    return upgraded


# version -> function producing version + 1
MIGRATIONS: dict[int, Callable[[dict], dict]] = {
    0: _upgrade_v0_to_v1,
}

REQUIRED_COLLECTIONS = ("wallets", "transactions")
OPTIONAL_COLLECTIONS = ("budgets", "liabilities")


class SnapshotValidator:
    """
    Loads raw snapshot payloads into a validated LedgerSnapshot.

    Raises InvalidBackup with the list of issues on any failure.
    """

    def __init__(self, target_version: int = SNAPSHOT_VERSION):
        self._target_version = target_version

    def load(self, payload: Union[str, bytes, Mapping[str, Any]]) -> LedgerSnapshot:
        """Run the full pipeline and return the validated snapshot."""
        data = self._parse(payload)

        self._raise_if(self._validate_shape(data), "Backup is missing required collections")

        version_issues = self._validate_version(data)
        self._raise_if(version_issues, "Backup version is not supported")

        data = self._migrate(data)

        snapshot, model_issues = self._validate_models(data)
        self._raise_if(model_issues, "Backup contains invalid records")

        self._raise_if(
            self._validate_references(snapshot),
            "Backup contains inconsistent references",
        )

        return snapshot

    def _raise_if(self, issues: list[SnapshotIssue], message: str) -> None:
        if issues:
            raise InvalidBackup(
                f"{message}: {issues[0].message}"
                + (f" (and {len(issues) - 1} more)" if len(issues) > 1 else ""),
                issues,
            )

    def _parse(self, payload: Union[str, bytes, Mapping[str, Any]]) -> dict:
        if isinstance(payload, Mapping):
            return dict(payload)

        try:
            data = json.loads(payload)
        except (TypeError, ValueError) as e:
            raise InvalidBackup(
                f"Backup is not valid JSON: {e}",
                [SnapshotIssue(field="$", issue_type="invalid_json", message=str(e))],
            ) from e

        if not isinstance(data, dict):
            raise InvalidBackup(
                "Backup must be a JSON object",
                [SnapshotIssue(
                    field="$",
                    issue_type="invalid_type",
                    message=f"Expected an object, got {type(data).__name__}",
                )],
            )
        return data

    def _validate_shape(self, data: dict) -> list[SnapshotIssue]:
        issues = []

        for name in REQUIRED_COLLECTIONS:
            if name not in data or data[name] is None:
                issues.append(SnapshotIssue(
                    field=name,
                    issue_type="missing",
                    message=f"'{name}' collection is required",
                ))
            elif not isinstance(data[name], list):
                issues.append(SnapshotIssue(
                    field=name,
                    issue_type="invalid_type",
                    message=f"'{name}' must be a list",
                ))

        for name in OPTIONAL_COLLECTIONS:
            if name in data and not isinstance(data[name], list):
                issues.append(SnapshotIssue(
                    field=name,
                    issue_type="invalid_type",
                    message=f"'{name}' must be a list",
                ))

        return issues

    def _validate_version(self, data: dict) -> list[SnapshotIssue]:
        version = data.get("version", 0)

        if isinstance(version, bool) or not isinstance(version, int) or version < 0:
            return [SnapshotIssue(
                field="version",
                issue_type="invalid_version",
                message=f"Snapshot version must be a non-negative integer, got {version!r}",
            )]

        if version > self._target_version:
            return [SnapshotIssue(
                field="version",
                issue_type="unsupported_version",
                message=(
                    f"Snapshot version {version} is newer than the supported "
                    f"version {self._target_version}"
                ),
            )]

        return []

    def _migrate(self, data: dict) -> dict:
        version = data.get("version", 0)
        while version < self._target_version:
            data = MIGRATIONS[version](data)
            version = data["version"]
        return data

    def _validate_models(self, data: dict) -> tuple[Optional[LedgerSnapshot], list[SnapshotIssue]]:
        try:
            return LedgerSnapshot.model_validate(data), []
        except ValidationError as e:
            issues = [
                SnapshotIssue(
                    field=".".join(str(part) for part in error["loc"]) or "$",
                    issue_type=error["type"],
                    message=f"{'.'.join(str(p) for p in error['loc'])}: {error['msg']}",
                )
                for error in e.errors()
            ]
            return None, issues

    def _validate_references(self, snapshot: LedgerSnapshot) -> list[SnapshotIssue]:
        issues = []

        for name, keys in (
            ("wallets", [w.id for w in snapshot.wallets]),
            ("transactions", [t.id for t in snapshot.transactions]),
            ("liabilities", [l.id for l in snapshot.liabilities]),
            ("budgets", [b.category for b in snapshot.budgets]),
        ):
            for key, count in Counter(keys).items():
                if count > 1:
                    issues.append(SnapshotIssue(
                        field=name,
                        issue_type="duplicate",
                        message=f"'{key}' appears {count} times in {name}",
                    ))

        wallet_ids = {w.id for w in snapshot.wallets}
        for index, tx in enumerate(snapshot.transactions):
            for wallet_id in tx.wallet_ids:
                if wallet_id not in wallet_ids:
                    issues.append(SnapshotIssue(
                        field=f"transactions.{index}",
                        issue_type="unknown_wallet",
                        message=f"Transaction {tx.id} references unknown wallet {wallet_id}",
                    ))

        return issues
