from django.contrib import admin
from django.utils.html import format_html
from django.urls import reverse

from .leaderboard import invalidate_leaderboard
from .models import Challenge, EventConfig, Participant, Submission

admin.site.site_header = "CyberArena CTF Administration"
admin.site.site_title = "CyberArena CTF Admin"
admin.site.index_title = "Contest Management Dashboard"


@admin.register(EventConfig)
class EventConfigAdmin(admin.ModelAdmin):
    fieldsets = (
        ('Event Information', {
            'fields': ('event_name', 'event_description')
        }),
        ('Timing', {
            'fields': ('start_time', 'end_time', 'is_event_active'),
            'description': 'Submissions are only accepted inside this window'
        }),
        ('Registration', {
            'fields': ('max_team_size', 'allow_late_registration')
        }),
    )

    def has_add_permission(self, request):
        # Only allow one configuration instance
        return not EventConfig.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ['team_id', 'team_name', 'total_score', 'solve_count', 'is_admin', 'is_active', 'last_activity_at']
    list_filter = ['is_admin', 'is_active']
    search_fields = ['team_id', 'team_name', 'email']
    fields = ['team_id', 'team_name', 'email', 'is_admin', 'is_active', 'total_score', 'last_activity_at', 'created_at']
    readonly_fields = ['team_id', 'total_score', 'last_activity_at', 'created_at']

    actions = ['activate_participants', 'deactivate_participants']

    def has_add_permission(self, request):
        # Accounts are provisioned with issued tokens, see the seed_contest command
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def solve_count(self, obj):
        return obj.challenges_solved
    solve_count.short_description = 'Solves'

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        # Active flag and team name both show on the leaderboard
        invalidate_leaderboard()

    def activate_participants(self, request, queryset):
        updated = queryset.update(is_active=True)
        invalidate_leaderboard()
        self.message_user(request, f'{updated} participants were successfully activated.')
    activate_participants.short_description = 'Activate selected participants'

    def deactivate_participants(self, request, queryset):
        updated = queryset.update(is_active=False)
        invalidate_leaderboard()
        self.message_user(request, f'{updated} participants were successfully deactivated.')
    deactivate_participants.short_description = 'Deactivate selected participants'


@admin.register(Challenge)
class ChallengeAdmin(admin.ModelAdmin):
    list_display = ['title', 'category', 'difficulty', 'points', 'is_active', 'solve_count', 'attempt_count', 'created_at']
    list_filter = ['category', 'difficulty', 'is_active', 'created_at']
    search_fields = ['title', 'description', 'category']
    list_editable = ['is_active']

    fieldsets = (
        ('Basic Information', {
            'fields': ('title', 'description', 'category', 'hints'),
        }),
        ('Challenge Settings', {
            'fields': ('points', 'flag', 'difficulty', 'is_active'),
            'description': 'Flags are matched exactly, case included'
        }),
    )

    def solve_count(self, obj):
        count = obj.solve_count
        if count > 0:
            url = reverse('admin:arena_submission_changelist') + f'?challenge__id__exact={obj.id}&is_correct__exact=1'
            return format_html('<a href="{}" style="color: green;">{}</a>', url, count)
        return count
    solve_count.short_description = 'Solves'

    def attempt_count(self, obj):
        count = obj.attempt_count
        if count > 0:
            url = reverse('admin:arena_submission_changelist') + f'?challenge__id__exact={obj.id}'
            return format_html('<a href="{}">{}</a>', url, count)
        return count
    attempt_count.short_description = 'Attempts'

    actions = ['deactivate_challenges', 'activate_challenges']

    def deactivate_challenges(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f'{updated} challenge(s) deactivated.')
    deactivate_challenges.short_description = 'Deactivate selected challenges'

    def activate_challenges(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, f'{updated} challenge(s) activated.')
    activate_challenges.short_description = 'Activate selected challenges'


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    """The ledger is append-only; the admin only reads it."""
    list_display = ['participant', 'challenge', 'is_correct', 'points_awarded', 'submitted_at']
    list_filter = ['is_correct', 'submitted_at', 'challenge__category', 'challenge']
    search_fields = ['participant__team_id', 'participant__team_name', 'challenge__title']
    readonly_fields = ['participant', 'challenge', 'submitted_text', 'is_correct', 'points_awarded', 'submitted_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
