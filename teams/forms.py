"""Forms for the team shuffle application."""
from __future__ import annotations

from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError
from django.template.defaultfilters import filesizeformat

from . import services


TEXT_INPUT_CLASSES = (
    "w-32 rounded-md border border-slate-300 bg-white px-3 py-2 "
    "dark:border-slate-600 dark:bg-slate-900 focus:outline-none focus:ring-2 focus:ring-slate-500"
)
WIDE_TEXT_INPUT_CLASSES = (
    "w-full rounded-md border border-slate-300 bg-white px-3 py-2 "
    "dark:border-slate-600 dark:bg-slate-900 focus:outline-none focus:ring-2 focus:ring-slate-500"
)
FILE_INPUT_CLASSES = (
    "block w-full text-sm file:mr-4 file:rounded-md file:border-0 file:bg-slate-700 "
    "file:px-4 file:py-2 file:text-white hover:file:bg-slate-600"
)


class NameUploadForm(forms.Form):
    """Handles CSV uploads of participant names."""

    file = forms.FileField(
        label="Upload CSV file",
        widget=forms.ClearableFileInput(attrs={"accept": ".csv", "class": FILE_INPUT_CLASSES}),
    )

    def clean_file(self):
        uploaded = self.cleaned_data["file"]
        limit = getattr(settings, "TEAMS_MAX_UPLOAD_BYTES", None)
        if limit and uploaded.size > limit:
            raise ValidationError(f"Upload a file smaller than {filesizeformat(limit)}.")
        return uploaded


class GroupSizeForm(forms.Form):
    """The partition stride typed by the user."""

    group_size = forms.IntegerField(
        label="Members per group",
        widget=forms.NumberInput(attrs={"min": 1, "class": TEXT_INPUT_CLASSES}),
    )


class EventTitleForm(forms.Form):
    title = forms.CharField(
        label="Event title",
        max_length=200,
        widget=forms.TextInput(attrs={"placeholder": "e.g. Spring Cup", "class": WIDE_TEXT_INPUT_CLASSES}),
    )

    def clean_title(self) -> str:
        title = self.cleaned_data["title"].strip()
        if not title:
            raise ValidationError("Give the event a title before saving.")
        return title


class ScoreForm(forms.Form):
    """Accepts any score text; unusable values count as zero."""

    score = forms.CharField(
        label="Score",
        required=False,
        strip=True,
        widget=forms.NumberInput(attrs={"step": "any", "class": TEXT_INPUT_CLASSES}),
    )

    def clean_score(self):
        return services.coerce_score(self.cleaned_data.get("score"))
