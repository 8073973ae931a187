from rest_framework.permissions import BasePermission, SAFE_METHODS


class IsStaffOrReadOnly(BasePermission):
    """
    Authenticated users may read; only staff may write.
    """
    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        return request.user.is_staff


class CanChangeOpportunity(BasePermission):
    """
    Staff, or users holding the `opportunities.change_opportunity` permission.
    """
    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return user.is_staff or user.has_perm("opportunities.change_opportunity")


class CanChangeOpportunityOrReadOnly(CanChangeOpportunity):
    """
    Authenticated users may read opportunities and their lines;
    writes need the same rights as changing an opportunity.
    """
    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        return super().has_permission(request, view)
