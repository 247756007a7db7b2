from accounts.models import Division, Town
from .geography import resolve_location
from .models import FileMovement


def _name_of(model, pk):
    if pk is None:
        return ''
    return model.objects.filter(pk=pk).values_list('name', flat=True).first() or ''


def snapshot(person, locations):
    """Name, designation and location names of a person as they are right now."""
    if person is None:
        return {'name': '', 'designation': '', 'town': '', 'division': ''}
    location = resolve_location(person, locations)
    return {
        'name': person.display_name,
        'designation': person.designation or person.role_name,
        'town': _name_of(Town, location.town_id),
        'division': _name_of(Division, location.division_id),
    }


def record_movement(efile, actor, target, remarks, locations, is_team_internal=False,
                    is_return_to_creator=False, tat_started=False):
    src = snapshot(actor, locations)
    dst = snapshot(target, locations)
    return FileMovement.objects.create(
        file=efile,
        from_user=actor,
        to_user=target,
        from_department=actor.department if actor else None,
        to_department=target.department if target else None,
        action_type=FileMovement.ActionType.MARK_TO,
        remarks=remarks or '',
        is_team_internal=is_team_internal,
        is_return_to_creator=is_return_to_creator,
        tat_started=tat_started,
        from_user_name=src['name'],
        from_user_designation=src['designation'],
        from_user_town=src['town'],
        from_user_division=src['division'],
        to_user_name=dst['name'],
        to_user_designation=dst['designation'],
        to_user_town=dst['town'],
        to_user_division=dst['division'],
    )


def get_movements(file_id):
    return FileMovement.objects.filter(file_id=file_id).order_by('-created_at', '-id')


def movement_as_dict(movement):
    return {
        'id': movement.pk,
        'action_type': movement.action_type,
        'remarks': movement.remarks,
        'from_user_id': movement.from_user_id,
        'from_user_name': movement.from_user_name,
        'from_user_designation': movement.from_user_designation,
        'from_user_town': movement.from_user_town,
        'from_user_division': movement.from_user_division,
        'to_user_id': movement.to_user_id,
        'to_user_name': movement.to_user_name,
        'to_user_designation': movement.to_user_designation,
        'to_user_town': movement.to_user_town,
        'to_user_division': movement.to_user_division,
        'is_team_internal': movement.is_team_internal,
        'is_return_to_creator': movement.is_return_to_creator,
        'tat_started': movement.tat_started,
        'created_at': movement.created_at.isoformat() if movement.created_at else None,
    }
