"""
Payment status derivation

Pure functions over a member snapshot. Each issue is evaluated
independently, then combined into flags and a composite label.
"""

from typing import List, Optional

from .models import BenefitAccess, Member, MemberStatus, PaymentIssue, PaymentStatusResult

STATUS_CURRENT = "current"
STATUS_MULTIPLE_ISSUES = "multiple_issues"
STATUS_NO_MEMBERSHIP = "no_membership"


def derive_payment_status(member: Optional[Member]) -> PaymentStatusResult:
    """
    Derive payment health from a member.

    Without a member the result is "no_membership" with every flag False,
    which callers treat as fully restricted.
    """
    if member is None:
        return PaymentStatusResult(status=STATUS_NO_MEMBERSHIP)

    fee_unpaid = member.annual_fee_paid_at is None
    has_subscription = bool(member.subscription_ref)
    no_subscription = not has_subscription and member.status != MemberStatus.PENDING_ACTIVATION
    past_due = member.status == MemberStatus.PAST_DUE

    issues: List[PaymentIssue] = []
    if fee_unpaid:
        issues.append(PaymentIssue.INITIATION_FEE_UNPAID)
    if no_subscription:
        issues.append(PaymentIssue.NO_SUBSCRIPTION)
    if past_due:
        issues.append(PaymentIssue.DUES_PAST_DUE)

    if len(issues) > 1:
        status = STATUS_MULTIPLE_ISSUES
    elif issues:
        status = issues[0].value
    else:
        status = STATUS_CURRENT

    return PaymentStatusResult(
        status=status,
        issues=issues,
        is_fully_paid=not fee_unpaid and has_subscription and not past_due,
        has_blocking_issues=fee_unpaid or no_subscription,
        has_non_blocking_issues=past_due,
    )


def benefit_access(result: PaymentStatusResult) -> BenefitAccess:
    if result.status == STATUS_NO_MEMBERSHIP or result.has_blocking_issues:
        return BenefitAccess.BLOCKED
    if result.has_non_blocking_issues:
        return BenefitAccess.DEGRADED
    return BenefitAccess.FULL


__all__ = [
    "STATUS_CURRENT",
    "STATUS_MULTIPLE_ISSUES",
    "STATUS_NO_MEMBERSHIP",
    "derive_payment_status",
    "benefit_access",
]
