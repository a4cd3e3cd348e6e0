from rest_framework import serializers


def is_staff_viewer(viewer) -> bool:
    if viewer is None or not getattr(viewer, 'is_authenticated', False):
        return False
    return viewer.is_admin() or viewer.is_process_manager()


def user_is_presentable(user) -> bool:
    return user.deleted_at is None and user.validated and user.active


class GroupedModelSerializer(serializers.ModelSerializer):
    """ModelSerializer whose fields are filtered by the request's groups.

    ``field_groups`` maps a field name to the groups allowed to see (read
    direction) or set (write direction) it. Fields without an entry are always
    present. The active groups come from ``context['groups']``; nested
    serializers read the root context, so children of a project are filtered
    with the project's groups. Without groups in the context no filtering
    happens (internal use, e.g. mail rendering).

    ``hidden_user_fields`` are rendered as ``None`` when the referenced user is
    deleted, unvalidated or inactive, unless the viewer is staff.
    """

    field_groups: dict = {}
    hidden_user_fields: tuple = ()

    def get_fields(self):
        fields = super().get_fields()
        groups = self.context.get('groups')
        if groups is None:
            return fields
        allowed = {}
        for name, field in fields.items():
            required = self.field_groups.get(name)
            if required is None or required & groups:
                allowed[name] = field
        return allowed

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not self.hidden_user_fields or is_staff_viewer(self.context.get('viewer')):
            return data
        for name in self.hidden_user_fields:
            if name not in data:
                continue
            user = getattr(instance, name, None)
            if user is not None and not user_is_presentable(user):
                data[name] = None
        return data
