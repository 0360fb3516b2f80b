from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import CharField
from django.db.models import EmailField
from django.utils.translation import gettext_lazy as _


class User(AbstractUser):
    """
    Default custom user model for vibesync.
    Professionals and companies share one account model, told apart by user_type.
    """

    class UserType(models.TextChoices):
        PROFESSIONAL = "professional", _("Professional")
        COMPANY = "company", _("Company")

    # First and last name do not cover name patterns around the globe
    name = CharField(_("Full Name"), blank=True, max_length=255)
    email = EmailField(_("email address"), unique=True)
    first_name = CharField(_("First Name"), max_length=150, blank=True)
    last_name = CharField(_("Last Name"), max_length=150, blank=True)
    user_type = CharField(
        _("User Type"),
        max_length=20,
        choices=UserType.choices,
        default=UserType.PROFESSIONAL,
    )
    profile_image_url = models.URLField(max_length=500, blank=True, default="")
    language = CharField(_("Language"), max_length=5, default="en")
    # Audit timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        # Keep the full name in sync with its parts
        full_name = f"{self.first_name} {self.last_name}".strip()
        if full_name:
            self.name = full_name
        super().save(*args, **kwargs)

    @property
    def display_name(self) -> str:
        return self.name or self.username or self.email
