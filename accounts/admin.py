from django.contrib import admin
from .models import (
    Zone, District, Town, Division, Department, Role, RoleLocation, EfilingUser, UserTeam
)


@admin.register(Zone)
class ZoneAdmin(admin.ModelAdmin):
    list_display = ('name', 'code')
    search_fields = ('name', 'code')


@admin.register(District)
class DistrictAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'zone')
    list_filter = ('zone',)
    search_fields = ('name', 'code')


@admin.register(Town)
class TownAdmin(admin.ModelAdmin):
    list_display = ('name', 'district')
    list_filter = ('district',)
    search_fields = ('name',)


@admin.register(Division)
class DivisionAdmin(admin.ModelAdmin):
    list_display = ('name', 'code')
    search_fields = ('name', 'code')


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'department_type')
    list_filter = ('department_type',)
    search_fields = ('name', 'code')


class RoleLocationInline(admin.StackedInline):
    model = RoleLocation
    can_delete = False


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'department')
    list_filter = ('department',)
    search_fields = ('name', 'code')
    inlines = [RoleLocationInline]


@admin.register(EfilingUser)
class EfilingUserAdmin(admin.ModelAdmin):
    list_display = ('user', 'role', 'department', 'designation', 'district', 'town', 'division', 'is_active')
    list_filter = ('role', 'department', 'division', 'is_active')
    search_fields = ('user__username', 'user__first_name', 'user__last_name', 'designation')
    autocomplete_fields = ['role']


@admin.register(UserTeam)
class UserTeamAdmin(admin.ModelAdmin):
    list_display = ('manager', 'team_member', 'team_role', 'is_active')
    list_filter = ('team_role', 'is_active')
    search_fields = ('manager__user__username', 'team_member__user__username')
