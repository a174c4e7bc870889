"""Views for the team shuffle application.

Each action loads the :class:`~teams.services.TeamBoard` from the session,
applies one operation and stores it back before redirecting.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.contrib import messages
from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils.http import content_disposition_header, url_has_allowed_host_and_scheme
from django.views.decorators.http import require_GET, require_POST

from . import exports, forms, services


logger = logging.getLogger(__name__)

BOARD_SESSION_KEY = "teams.board"


def _default_group_size() -> int:
    return int(getattr(settings, "TEAMS_DEFAULT_GROUP_SIZE", 2))


def _load_board(request: HttpRequest) -> services.TeamBoard:
    """Return the board stored in the session, or an empty one."""

    payload = request.session.get(BOARD_SESSION_KEY)
    try:
        return services.TeamBoard.from_dict(payload, default_group_size=_default_group_size())
    except (KeyError, TypeError, ValueError):
        logger.warning("Discarding unreadable board state from session %s", request.session.session_key)
        request.session.pop(BOARD_SESSION_KEY, None)
        return services.TeamBoard(group_size=_default_group_size())


def _save_board(request: HttpRequest, board: services.TeamBoard) -> None:
    request.session[BOARD_SESSION_KEY] = board.to_dict()
    request.session.modified = True


def _redirect_back(request: HttpRequest) -> HttpResponse:
    target = request.POST.get("next") or request.GET.get("next")
    if target and url_has_allowed_host_and_scheme(
        target, allowed_hosts={request.get_host()}, require_https=request.is_secure()
    ):
        return redirect(target)
    return redirect(reverse("teams:board"))


def _form_errors(form) -> str:
    return " ".join(error for errors in form.errors.values() for error in errors)


def _page_context(board: services.TeamBoard) -> dict[str, object]:
    return {
        "board": board,
        "teams": board.displayed_teams,
        "event": board.event,
        "upload_form": forms.NameUploadForm(),
        "size_form": forms.GroupSizeForm(initial={"group_size": board.group_size}),
        "title_form": forms.EventTitleForm(),
    }


@require_GET
def board_page(request: HttpRequest) -> HttpResponse:
    """Team manager: import, shuffle, save an event, score and export."""

    board = _load_board(request)
    return render(request, "teams/board.html", _page_context(board))


@require_GET
def quick_page(request: HttpRequest) -> HttpResponse:
    """Plain shuffler without events or scores."""

    board = _load_board(request)
    return render(request, "teams/quick.html", _page_context(board))


@require_POST
def import_names(request: HttpRequest) -> HttpResponse:
    form = forms.NameUploadForm(request.POST, request.FILES)
    if not form.is_valid():
        messages.error(request, _form_errors(form))
        return _redirect_back(request)

    upload = form.cleaned_data["file"]
    try:
        text = services.read_upload_text(upload)
    except OSError:
        logger.exception("Could not read uploaded file %r", upload.name)
        messages.error(request, f"Could not read {upload.name}. Please try again.")
        return _redirect_back(request)
    finally:
        upload.close()

    board = _load_board(request)
    count = board.import_names(text)
    _save_board(request, board)
    if count:
        messages.success(request, f"{count} members loaded.")
    else:
        messages.warning(request, f"No names found in {upload.name}.")
    return _redirect_back(request)


@require_POST
def generate_teams(request: HttpRequest) -> HttpResponse:
    board = _load_board(request)
    form = forms.GroupSizeForm(request.POST)
    if not form.is_valid():
        messages.error(request, _form_errors(form))
        return _redirect_back(request)

    board.set_group_size(form.cleaned_data["group_size"])
    if board.generate_teams():
        messages.success(request, f"Shuffled {len(board.names)} members into {len(board.teams)} groups.")
    elif not board.names:
        messages.info(request, "Load a CSV of names first.")
    else:
        messages.error(request, "Members per group must be at least 1.")
    _save_board(request, board)
    return _redirect_back(request)


@require_POST
def save_event(request: HttpRequest) -> HttpResponse:
    board = _load_board(request)
    if not board.teams:
        messages.info(request, "Generate teams before saving an event.")
        return _redirect_back(request)

    form = forms.EventTitleForm(request.POST)
    if not form.is_valid():
        messages.error(request, _form_errors(form))
        return _redirect_back(request)

    board.save_event(form.cleaned_data["title"])
    _save_board(request, board)
    messages.success(request, f"Saved event {board.event.title}.")
    return _redirect_back(request)


@require_POST
def update_score(request: HttpRequest, index: int) -> HttpResponse:
    board = _load_board(request)
    form = forms.ScoreForm(request.POST)
    # ScoreForm never rejects input; unusable values become 0.
    form.is_valid()
    score = form.cleaned_data.get("score", 0)

    if board.update_score(index, score):
        _save_board(request, board)
        messages.success(request, f"{board.event.teams[index].name}: score set to {score}.")
    elif board.event is None:
        messages.info(request, "Save the event before recording scores.")
    else:
        messages.warning(request, "That team is not part of the saved event.")
    return _redirect_back(request)


@require_GET
def export_scores(request: HttpRequest) -> HttpResponse:
    """Download the saved event as a ``Scores`` workbook."""

    board = _load_board(request)
    if board.event is None:
        messages.info(request, "Save an event before exporting scores.")
        return _redirect_back(request)

    try:
        workbook_bytes = exports.build_scores_workbook(board.event)
    except (OSError, ValueError):
        logger.exception("Export failed for event %r", board.event.title)
        messages.error(request, "The spreadsheet could not be created. Please try again.")
        return _redirect_back(request)

    filename = exports.export_filename(board.event.title)
    response = HttpResponse(workbook_bytes, content_type=exports.XLSX_CONTENT_TYPE)
    response["Content-Disposition"] = content_disposition_header(True, filename)
    logger.info("Exported %d teams for event %r", len(board.event.teams), board.event.title)
    return response
