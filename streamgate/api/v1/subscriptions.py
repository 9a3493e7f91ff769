"""Subscription endpoints and the subscription access check."""

from fastapi import APIRouter, status

from streamgate.api.deps import AdminDep, CurrentUserDep, StoreDep, SubscriptionServiceDep
from streamgate.schemas.auth import MessageResponse
from streamgate.schemas.subscription import (
    AccessDecisionResponse,
    CreateSubscriptionRequest,
    MySubscriptionResponse,
    SubscribeRequest,
    SubscriptionSnapshot,
    SubscriptionStatus,
)
from streamgate.services.guards import check_subscription_access, enforce, evaluate

router = APIRouter()


@router.post("", response_model=SubscriptionSnapshot, status_code=status.HTTP_201_CREATED)
def create_subscription(
    body: CreateSubscriptionRequest,
    _admin: AdminDep,
    subscriptions: SubscriptionServiceDep,
) -> SubscriptionSnapshot:
    """Create a subscription with explicit dates for any user (admin only)."""
    subscription = subscriptions.create(
        body.user_id,
        body.plan_type,
        body.start_date,
        body.expiry_date,
        auto_renew=body.auto_renew,
    )
    return SubscriptionSnapshot.from_model(subscription)


@router.post("/subscribe", response_model=SubscriptionSnapshot, status_code=status.HTTP_201_CREATED)
def subscribe(
    body: SubscribeRequest,
    user: CurrentUserDep,
    subscriptions: SubscriptionServiceDep,
) -> SubscriptionSnapshot:
    """Subscribe the caller to a monthly (30 days) or yearly (365 days) plan."""
    subscription = subscriptions.subscribe(user.id, body.plan_type)
    return SubscriptionSnapshot.from_model(subscription)


@router.get("/my-subscription", response_model=MySubscriptionResponse)
def my_subscription(
    user: CurrentUserDep,
    subscriptions: SubscriptionServiceDep,
) -> MySubscriptionResponse:
    """The caller's subscription with validity and days remaining."""
    current = subscriptions.status(user.id)
    if current is None:
        return MySubscriptionResponse(has_subscription=False, message="No active subscription")
    return MySubscriptionResponse(has_subscription=True, subscription=current)


@router.patch("/renew", response_model=SubscriptionSnapshot)
def renew(
    body: SubscribeRequest,
    user: CurrentUserDep,
    subscriptions: SubscriptionServiceDep,
) -> SubscriptionSnapshot:
    """Restart the caller's subscription now with the given plan."""
    subscription = subscriptions.renew(user.id, body.plan_type)
    return SubscriptionSnapshot.from_model(subscription)


@router.delete("/cancel", response_model=MessageResponse)
def cancel(
    user: CurrentUserDep,
    subscriptions: SubscriptionServiceDep,
) -> MessageResponse:
    """Deactivate the caller's subscription and turn off auto-renew."""
    subscriptions.cancel(user.id)
    return MessageResponse(message="Subscription cancelled successfully")


@router.get("/user/{user_id}", response_model=SubscriptionStatus | None)
def user_subscription(
    user_id: str,
    _admin: AdminDep,
    subscriptions: SubscriptionServiceDep,
) -> SubscriptionStatus | None:
    """Subscription of any user (admin only); null when there is none."""
    return subscriptions.status(user_id)


@router.get(
    "/access",
    response_model=AccessDecisionResponse,
    responses={403: {"description": "Upgrade required, no subscription, or expired"}},
)
def check_access(user: CurrentUserDep, store: StoreDep) -> AccessDecisionResponse:
    """Run the subscription guard for the caller; 403 with a reason code on deny."""
    decision = evaluate(
        [lambda: check_subscription_access(user, store.find_subscription_by_identity_id)]
    )
    enforce(decision)
    return AccessDecisionResponse(allowed=True)
