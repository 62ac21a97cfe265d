from rest_framework.permissions import SAFE_METHODS, BasePermission


class IsOperator(BasePermission):
    """
    Allow access only to operators of the venue.
    Superusers automatically pass.
    """

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return bool(getattr(request.user, "is_operator", False))


class IsOperatorOrReadOnly(IsOperator):
    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return super().has_permission(request, view)
