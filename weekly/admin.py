from django.contrib import admin

from .models import Ballot, BallotEntry, Genre, Member, Nomination, Week


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active", "is_admin", "added_at")
    list_filter = ("is_active", "is_admin")
    search_fields = ("name",)


@admin.register(Genre)
class GenreAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active", "added_at")
    list_filter = ("is_active",)
    search_fields = ("name",)


class NominationInline(admin.TabularInline):
    model = Nomination
    extra = 0
    fields = ("film_title", "film_year", "member", "nominated_at")
    readonly_fields = fields
    can_delete = False


@admin.register(Week)
class WeekAdmin(admin.ModelAdmin):
    # la fase i el guanyador només es toquen des del flux setmanal
    list_display = ("week_date", "phase", "genre", "winning_nomination", "winning_score")
    list_filter = ("phase",)
    readonly_fields = ("phase", "winning_nomination", "winning_score", "results", "completed_at", "created_at")
    inlines = [NominationInline]


class BallotEntryInline(admin.TabularInline):
    model = BallotEntry
    extra = 0
    readonly_fields = ("nomination", "points")
    can_delete = False


@admin.register(Ballot)
class BallotAdmin(admin.ModelAdmin):
    list_display = ("week", "member", "submitted_at")
    search_fields = ("member__name",)
    inlines = [BallotEntryInline]

    def has_change_permission(self, request, obj=None):
        return False
