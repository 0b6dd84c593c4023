from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """The verified caller of a request, as handed to the marketplace services."""

    user_id: int
    email: str
    role: str = "user"
    subscription_active: bool = False

    @classmethod
    def from_user(cls, user):
        return cls(
            user_id=user.pk,
            email=user.email,
            role=getattr(user, "role", "user"),
            subscription_active=bool(getattr(user, "subscription_active", False)),
        )

    @property
    def is_admin(self):
        return self.role == "admin"
