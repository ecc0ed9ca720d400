"""
Row-level security filter builder.

Turns an RLS policy tag from the permission document into a composable SQL
WHERE fragment with positional `$N` placeholders. Unknown policies deny all
rows.

Usage:
    rls = build_rls_filter("own_work_orders_only", user_id=42, param_offset=2)
    # rls.clause == "customer_id = $3", rls.params == [42]
"""

import logging
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DENY_ALL_CLAUSE = "1=0"


class RLSFilterConfig(BaseModel):
    """Per-entity column names used by the record-scoped policies."""

    own_record_field: str = Field("id", description="Column holding the user's own ID")
    customer_field: str = Field(
        "customer_id", description="Column linking a record to its customer"
    )
    assigned_field: str = Field(
        "assigned_technician_id", description="Column holding the assignee"
    )


class RLSFilter(BaseModel):
    """WHERE fragment plus its parameters; applied is True only when rows are restricted."""

    clause: str = ""
    params: list[Any] = Field(default_factory=list)
    applied: bool = False


def _no_filter(user_id: Any, fields: RLSFilterConfig, offset: int) -> RLSFilter:
    return RLSFilter()


def _deny_all(user_id: Any, fields: RLSFilterConfig, offset: int) -> RLSFilter:
    return RLSFilter(clause=DENY_ALL_CLAUSE, applied=True)


def _match_column(column: Callable[[RLSFilterConfig], str]):
    def handler(user_id: Any, fields: RLSFilterConfig, offset: int) -> RLSFilter:
        return RLSFilter(
            clause=f"{column(fields)} = ${offset + 1}", params=[user_id], applied=True
        )

    return handler


POLICY_HANDLERS: dict[str, Callable[[Any, RLSFilterConfig, int], RLSFilter]] = {
    "all_records": _no_filter,
    "public_resource": _no_filter,
    "own_record_only": _match_column(lambda f: f.own_record_field),
    "own_work_orders_only": _match_column(lambda f: f.customer_field),
    "assigned_work_orders_only": _match_column(lambda f: f.assigned_field),
    "own_invoices_only": _match_column(lambda f: f.customer_field),
    "own_contracts_only": _match_column(lambda f: f.customer_field),
    "deny_all": _deny_all,
}


def build_rls_filter(
    policy: Optional[str],
    user_id: Any,
    filter_config: Optional[RLSFilterConfig] = None,
    param_offset: int = 0,
) -> RLSFilter:
    """
    Build the RLS filter for a policy.

    Args:
        policy: RLS policy tag, or None when the resource defines none
        user_id: ID of the requesting user, bound as the filter parameter
        filter_config: Column names for the entity being queried
        param_offset: Number of placeholders already used by the query

    Returns:
        RLSFilter; an unapplied empty filter when no policy is given,
        a deny-all filter for unknown policies
    """
    if not policy:
        logger.debug("No RLS policy provided")
        return RLSFilter()

    handler = POLICY_HANDLERS.get(policy)
    if handler is None:
        logger.warning(f"Unknown RLS policy '{policy}', denying access")
        return RLSFilter(clause=DENY_ALL_CLAUSE, applied=True)

    return handler(user_id, filter_config or RLSFilterConfig(), param_offset)


def build_rls_filter_for_find_by_id(
    policy: Optional[str],
    user_id: Any,
    filter_config: Optional[RLSFilterConfig] = None,
    param_offset: int = 1,
) -> RLSFilter:
    """RLS filter to AND with `id = $1` when fetching a single record."""
    return build_rls_filter(policy, user_id, filter_config, param_offset)


def policy_allows_access(policy: Optional[str]) -> bool:
    """True unless the policy denies every row (deny_all or unknown)."""
    return policy != "deny_all" and policy in POLICY_HANDLERS


def supported_policies() -> list[str]:
    return list(POLICY_HANDLERS)
