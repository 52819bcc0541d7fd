from django import forms
from django.core.exceptions import ValidationError
from django.forms.models import model_to_dict

from .models import Challenge, EventConfig, Participant


def bind(form_class, payload, instance=None, defaults=None):
    """
    Bind a JSON payload to a ModelForm.

    Updates are partial: fields missing from ``payload`` keep the stored
    value instead of being blanked by the form.
    """
    if instance is not None:
        data = model_to_dict(instance, fields=form_class._meta.fields)
    else:
        data = dict(defaults or {})
    data.update(payload or {})
    return form_class(data=data, instance=instance)


class ChallengeForm(forms.ModelForm):
    CREATE_DEFAULTS = {'is_active': True, 'difficulty': 'medium', 'hints': []}

    class Meta:
        model = Challenge
        fields = ['title', 'description', 'category', 'difficulty', 'points', 'flag', 'is_active', 'hints']

    def clean_hints(self):
        hints = self.cleaned_data.get('hints') or []
        if not isinstance(hints, list) or not all(isinstance(h, str) for h in hints):
            raise ValidationError('Hints must be a list of strings.')
        return hints

    def clean_title(self):
        title = self.cleaned_data['title'].strip()
        if not title:
            raise ValidationError('Title must not be blank.')
        return title


class ParticipantForm(forms.ModelForm):
    CREATE_DEFAULTS = {'is_admin': False}

    class Meta:
        model = Participant
        fields = ['team_id', 'team_name', 'email', 'is_admin']

    def clean_team_id(self):
        team_id = self.cleaned_data['team_id'].strip()
        if self.instance.pk and team_id != self.instance.team_id:
            raise ValidationError('Team ID can not be changed after creation.')
        return team_id


class EventConfigForm(forms.ModelForm):

    class Meta:
        model = EventConfig
        fields = [
            'event_name', 'event_description', 'start_time', 'end_time',
            'is_event_active', 'max_team_size', 'allow_late_registration',
        ]
