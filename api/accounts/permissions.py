from rest_framework.permissions import BasePermission

from app.permissions import is_admin


class UserAccess(BasePermission):
    """Admins manage every account; users manage their own once active and validated.

    Deleted accounts stay readable for admins only.
    """

    def has_permission(self, request, view) -> bool:
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj) -> bool:
        user = request.user
        if obj.is_deleted():
            return view.action == 'retrieve' and is_admin(user)
        if is_admin(user):
            return True
        return obj.pk == user.pk and user.active and user.validated
