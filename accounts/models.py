from django.conf import settings
from django.db import models


class Zone(models.Model):
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=20, unique=True)

    def __str__(self):
        return f"{self.name} ({self.code})"


class District(models.Model):
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=20, unique=True, help_text="e.g. KHI-S")
    zone = models.ForeignKey(Zone, on_delete=models.SET_NULL, null=True, blank=True, related_name='districts')

    def __str__(self):
        return f"{self.name} ({self.code})"


class Town(models.Model):
    name = models.CharField(max_length=100)
    district = models.ForeignKey(District, on_delete=models.CASCADE, related_name='towns')

    def __str__(self):
        return self.name


class Division(models.Model):
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=20, unique=True)

    def __str__(self):
        return f"{self.name} ({self.code})"


class Department(models.Model):
    class DepartmentType(models.TextChoices):
        DISTRICT = 'district', 'District'
        TOWN = 'town', 'Town'
        DIVISION = 'division', 'Division'
        GLOBAL = 'global', 'Global'

    name = models.CharField(max_length=150)
    code = models.CharField(max_length=30, unique=True)
    department_type = models.CharField(
        max_length=20, choices=DepartmentType.choices, default=DepartmentType.DISTRICT,
        help_text="Default routing scope for files of this department"
    )

    def __str__(self):
        return self.name


class Role(models.Model):
    name = models.CharField(max_length=150)
    code = models.CharField(max_length=50, unique=True, help_text="e.g. SE_CEN, XEN_WAT, CEO")
    department = models.ForeignKey(Department, on_delete=models.SET_NULL, null=True, blank=True, related_name='roles')

    @property
    def normalised_code(self):
        return (self.code or '').upper()

    def __str__(self):
        return f"{self.name} ({self.code})"


class RoleLocation(models.Model):
    """
    Default geography of a role, used when a role-holder has no personal
    district/town/division of their own.
    """
    role = models.OneToOneField(Role, on_delete=models.CASCADE, related_name='default_location')
    zone = models.ForeignKey(Zone, on_delete=models.SET_NULL, null=True, blank=True)
    district = models.ForeignKey(District, on_delete=models.SET_NULL, null=True, blank=True)
    town = models.ForeignKey(Town, on_delete=models.SET_NULL, null=True, blank=True)
    division = models.ForeignKey(Division, on_delete=models.SET_NULL, null=True, blank=True)

    def __str__(self):
        return f"Default location for {self.role.code}"


class EfilingUser(models.Model):
    """
    A role-holder in the e-filing system, linked to a login account.
    """
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='efiling_profile')
    role = models.ForeignKey(Role, on_delete=models.PROTECT, null=True, blank=True, related_name='holders')
    department = models.ForeignKey(Department, on_delete=models.SET_NULL, null=True, blank=True, related_name='members')
    designation = models.CharField(max_length=150, blank=True)

    # Personal geography. Null fields fall back to the role's default location.
    district = models.ForeignKey(District, on_delete=models.SET_NULL, null=True, blank=True)
    town = models.ForeignKey(Town, on_delete=models.SET_NULL, null=True, blank=True)
    division = models.ForeignKey(Division, on_delete=models.SET_NULL, null=True, blank=True)

    contact_number = models.CharField(max_length=20, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "E-Filing User"
        verbose_name_plural = "E-Filing Users"

    @property
    def role_code(self):
        return self.role.normalised_code if self.role_id else ''

    @property
    def role_name(self):
        return self.role.name if self.role_id else ''

    @property
    def display_name(self):
        return self.user.get_full_name() or self.user.get_username()

    def __str__(self):
        return f"{self.display_name} ({self.role_code or 'no role'})"


class UserTeam(models.Model):
    class TeamRole(models.TextChoices):
        MEMBER = 'MEMBER', 'Member'
        AO = 'AO', 'Account Officer'
        ASSISTANT = 'ASSISTANT', 'Assistant'
        SE_ASSISTANT = 'SE_ASSISTANT', 'SE Assistant'

    ASSISTANT_ROLES = (TeamRole.AO, TeamRole.ASSISTANT, TeamRole.SE_ASSISTANT)

    manager = models.ForeignKey(EfilingUser, on_delete=models.CASCADE, related_name='team_links')
    team_member = models.ForeignKey(EfilingUser, on_delete=models.CASCADE, related_name='manager_links')
    team_role = models.CharField(max_length=20, choices=TeamRole.choices, default=TeamRole.MEMBER)
    is_active = models.BooleanField(default=True)

    class Meta:
        unique_together = ('manager', 'team_member')
        verbose_name = "Team Link"
        verbose_name_plural = "Team Links"

    def __str__(self):
        return f"{self.manager} -> {self.team_member} ({self.team_role})"
