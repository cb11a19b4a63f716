from django.urls import path

from . import views


urlpatterns = [
    path("", views.calendar_view, name="calendar"),
    path("weeks/export/", views.export_history_view, name="weeks_export"),
    path("weeks/<str:week_date>/", views.week_detail_view, name="week_detail"),
    path("weeks/<str:week_date>/genre/", views.set_genre_view, name="set_genre"),
    path("weeks/<str:week_date>/nominations/", views.propose_nomination_view, name="propose_nomination"),
    path("weeks/<str:week_date>/open-voting/", views.open_voting_view, name="open_voting"),
    path("weeks/<str:week_date>/ballots/", views.submit_ballot_view, name="submit_ballot"),
    path("weeks/<str:week_date>/calculate-results/", views.calculate_results_view, name="calculate_results"),
    path("weeks/<str:week_date>/results/", views.results_view, name="results"),
    path("nominations/<int:nomination_id>/delete/", views.remove_nomination_view, name="remove_nomination"),
    path("api/search-films", views.search_films_view, name="search_films"),
    path("api/film/<int:tmdb_id>", views.film_details_view, name="film_details"),
]
