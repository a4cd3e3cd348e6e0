from rest_framework.permissions import SAFE_METHODS, BasePermission


def is_admin(user) -> bool:
    return bool(user and user.is_authenticated and user.is_admin())


def is_staff(user) -> bool:
    """Admins and process managers; admins pass every process manager check."""
    return bool(user and user.is_authenticated and (user.is_admin() or user.is_process_manager()))


class IsAdmin(BasePermission):
    def has_permission(self, request, view) -> bool:
        return is_admin(request.user)


class IsProcessManager(BasePermission):
    def has_permission(self, request, view) -> bool:
        return is_staff(request.user)


class IsAnonymous(BasePermission):
    message = 'This operation is not available to logged-in users.'

    def has_permission(self, request, view) -> bool:
        return not request.user.is_authenticated


class IsStaffOrReadOnly(BasePermission):
    """Reference data: anyone reads, admins and process managers write."""

    def has_permission(self, request, view) -> bool:
        if request.method in SAFE_METHODS:
            return True
        return is_staff(request.user)
