from django.contrib.auth.mixins import LoginRequiredMixin, UserPassesTestMixin
from django.http import JsonResponse


class ApiLoginRequiredMixin(LoginRequiredMixin):
    """Answer anonymous API calls with a JSON 401 instead of a login redirect."""

    def handle_no_permission(self):
        return JsonResponse({"message": "Unauthorized"}, status=401)


class ManagerRequiredMixin(ApiLoginRequiredMixin, UserPassesTestMixin):
    """Restrict an API view to cooperative managers."""

    def test_func(self):
        user = self.request.user
        return bool(user and user.is_authenticated and getattr(user, "is_manager", False))

    def handle_no_permission(self):
        user = getattr(self.request, "user", None)
        if user and user.is_authenticated:
            return JsonResponse({"message": "Forbidden"}, status=403)
        return super().handle_no_permission()


class ManagerWriteMixin(ManagerRequiredMixin):
    """Let any authenticated user read, but keep writes for managers."""

    read_methods = ("get", "head", "options")

    def test_func(self):
        if self.request.method.lower() in self.read_methods:
            user = self.request.user
            return bool(user and user.is_authenticated)
        return super().test_func()
