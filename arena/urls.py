from django.urls import path
from . import views

app_name = 'arena'

urlpatterns = [
    # Auth
    path('api/auth/login', views.login, name='login'),
    path('api/auth/me', views.me, name='me'),

    # Scoreboard and stats
    path('api/leaderboard', views.leaderboard_view, name='leaderboard'),
    path('api/user/stats', views.user_stats, name='user_stats'),
    path('api/user/submissions', views.user_submissions, name='user_submissions'),

    # Challenges
    path('api/challenges', views.challenge_list, name='challenge_list'),
    path('api/challenges/<int:pk>', views.challenge_detail, name='challenge_detail'),
    path('api/submissions', views.submit_flag, name='submit_flag'),

    # Admin
    path('api/admin/challenges', views.admin_challenges, name='admin_challenges'),
    path('api/admin/challenges/<int:pk>', views.admin_challenge_detail, name='admin_challenge_detail'),
    path('api/admin/users', views.admin_users, name='admin_users'),
    path('api/event/config', views.event_config, name='event_config'),
]
