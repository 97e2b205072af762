from models.user import RegistrationStage


def _has_text(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def compute_stage(user: dict | None) -> RegistrationStage:
    """
    Derive the onboarding stage from stored fields only.
    Called on every request; the stored registration_stage is never trusted.
    """
    if not user:
        return RegistrationStage.UNAUTHENTICATED

    profile = user.get("profile") or {}
    if not _has_text(profile.get("first_name")):
        return RegistrationStage.BASIC_INCOMPLETE

    if user.get("is_seller") is True:
        seller_profile = user.get("seller_profile") or {}
        if seller_profile.get("submitted_at"):
            return RegistrationStage.SELLER_COMPLETE
        return RegistrationStage.SELLER_INCOMPLETE

    # is_seller false, or flipped back after seller completion
    return RegistrationStage.BASIC_COMPLETE


def is_basic_complete(stage: RegistrationStage) -> bool:
    return stage in {
        RegistrationStage.BASIC_COMPLETE,
        RegistrationStage.SELLER_INCOMPLETE,
        RegistrationStage.SELLER_COMPLETE,
    }


def next_step_path(stage: RegistrationStage) -> str:
    """Where the gate forwards a user who has finished their current stage."""
    if stage == RegistrationStage.UNAUTHENTICATED:
        return "/login"
    if stage == RegistrationStage.BASIC_INCOMPLETE:
        return "/complete-registration"
    if stage == RegistrationStage.SELLER_INCOMPLETE:
        return "/complete-seller-registration"
    return "/shop"
