from django.urls import path

from . import views

app_name = "users"

urlpatterns = [
    path("auth/login/", views.LoginView.as_view(), name="login"),
    path("auth/logout/", views.LogoutView.as_view(), name="logout"),
    path("user/", views.UserProfileView.as_view(), name="profile"),
    path("user/update/", views.UserProfileUpdateView.as_view(), name="profile-update"),
    path("user/change-password/", views.PasswordChangeView.as_view(), name="change-password"),
    path("users/", views.WastepickerListView.as_view(), name="wastepickers"),
    path("users/all/", views.WorkerListView.as_view(), name="all"),
    path("users/create/", views.WorkerCreateView.as_view(), name="create"),
    path("users/update/", views.WorkerUpdateView.as_view(), name="update"),
    path("users/delete/", views.WorkerDeleteView.as_view(), name="delete"),
    path(
        "users/assign-wastepicker-ids/",
        views.AssignWastepickerCodesView.as_view(),
        name="assign-wastepicker-ids",
    ),
    path("birthdays/", views.BirthdayListView.as_view(), name="birthdays"),
]
