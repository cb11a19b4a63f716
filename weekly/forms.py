from django import forms
from django.conf import settings

from .scoring_engine import points_from_order


class SetGenreForm(forms.Form):
    genre = forms.IntegerField(required=False, min_value=1, help_text="Id d'un gènere del catàleg")
    custom_genre = forms.CharField(required=False, max_length=getattr(settings, "FILMCLUB_MAX_GENRE_LENGTH", 50))
    random = forms.BooleanField(required=False)
    member = forms.CharField(required=False, max_length=50)

    def clean_custom_genre(self):
        value = (self.cleaned_data.get("custom_genre") or "").strip()
        if "<" in value or ">" in value:
            raise forms.ValidationError("Invalid characters in genre name.")
        return value

    def clean(self):
        cleaned = super().clean()
        chosen = [
            cleaned.get("genre") is not None,
            bool(cleaned.get("custom_genre")),
            bool(cleaned.get("random")),
        ]
        if sum(chosen) != 1:
            raise forms.ValidationError("Select a genre, enter a custom genre or pick one at random.")
        return cleaned


class NominationForm(forms.Form):
    member = forms.CharField(max_length=50)
    film_title = forms.CharField(max_length=255)
    film_year = forms.IntegerField(required=False, min_value=1870, max_value=2100)
    tmdb_id = forms.IntegerField(required=False, min_value=1)
    poster_path = forms.CharField(required=False, max_length=255)
    director = forms.CharField(required=False, max_length=255)
    runtime = forms.IntegerField(required=False, min_value=1, max_value=32767)
    overview = forms.CharField(required=False)
    vote_average = forms.FloatField(required=False, min_value=0, max_value=10)

    def clean_film_title(self):
        title = self.cleaned_data["film_title"].strip()
        if not title:
            raise forms.ValidationError("Film title is required.")
        return title

    def film(self) -> dict:
        data = dict(self.cleaned_data)
        data.pop("member", None)
        return data


class BallotForm(forms.Form):
    """
    Dues formes d'enviar el vot:
    - ranking: {"<nomination_id>": punts, ...}
    - order: [nomination_id, ...] de més a menys preferida
    """
    member = forms.CharField(max_length=50)
    ranking = forms.JSONField(required=False)
    order = forms.JSONField(required=False)

    def clean(self):
        cleaned = super().clean()
        ranking = cleaned.get("ranking")
        order = cleaned.get("order")

        if bool(ranking) == bool(order):
            raise forms.ValidationError("Send either 'ranking' or 'order'.")

        return cleaned

    def ranking_payload(self):
        # la validació de fons (permutació 1..N) la fa el BallotStore
        order = self.cleaned_data.get("order")
        if order:
            return points_from_order(order)
        return self.cleaned_data.get("ranking")
