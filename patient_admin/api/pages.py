"""HTML pages: patient list with search/pagination, and the create/update form."""

from datetime import date
from typing import Any
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from pydantic import ValidationError

from patient_admin.api.deps import get_browser_session, get_config, get_patients_data, safe_return_to, templates
from patient_admin.config import AppConfig
from patient_admin.models.fhir import Bundle
from patient_admin.models.forms import (
    Gender,
    PatientFormValues,
    build_patient_payload,
    form_errors,
    initial_form_values,
    merge_patient_payload,
)
from patient_admin.models.session import BrowserSession
from patient_admin.services.patients_data import PatientsDataAccess, QueryResult
from patient_admin.utils.logging import get_logger
from patient_admin.views.pagination import next_page, pagination_items, previous_page, total_pages
from patient_admin.views.rows import build_rows
from patient_admin.views.search_state import SEARCH_BY_OPTIONS, SearchQueryState

logger = get_logger(__name__)

router = APIRouter()

FORM_FIELDS = ("firstName", "lastName", "gender", "dateOfBirth", "phone")


def list_url(state: SearchQueryState, **extra: str) -> str:
    """URL of the list view showing ``state``."""
    return "/?" + urlencode(state.to_query_params() | extra)


def table_context(state: SearchQueryState, result: QueryResult[Bundle], config: AppConfig) -> dict[str, Any]:
    """Template context shared by the full list page and the live-search fragment."""
    bundle = result.data
    pages = total_pages(bundle.total if bundle else 0, config.page_size)
    prev_index = previous_page(state.page)
    next_index = next_page(state.page, pages)
    return {
        "state": state,
        "rows": build_rows(bundle.patients if bundle else []),
        "pagination": pagination_items(state.page, pages),
        "page_url": lambda index: list_url(state.with_page(index)),
        "previous_url": list_url(state.with_page(prev_index)) if prev_index is not None else None,
        "next_url": list_url(state.with_page(next_index)) if next_index is not None else None,
        "current_url": list_url(state),
    }


@router.get("/", response_class=HTMLResponse, tags=["Patients"])
async def patient_list(
    request: Request,
    config: AppConfig = Depends(get_config),
    session: BrowserSession = Depends(get_browser_session),
    patients: PatientsDataAccess = Depends(get_patients_data),
) -> Response:
    """List patients for the search state carried in the URL."""
    state = SearchQueryState.from_query_params(request.query_params)
    if not SearchQueryState.is_canonical(request.query_params):
        return RedirectResponse(list_url(state), status_code=302)

    result = await patients.get_all_patients(state.list_params(config.page_size))

    context = table_context(state, result, config)
    context.update(
        search_by_options=SEARCH_BY_OPTIONS,
        confirm_delete=request.query_params.get("confirmDelete"),
        toasts=session.pop_toasts(),
    )
    return templates.TemplateResponse(request, "patients/index.html", context)


@router.get("/patients/table", response_class=HTMLResponse, tags=["Patients"])
async def patient_table(
    request: Request,
    config: AppConfig = Depends(get_config),
    session: BrowserSession = Depends(get_browser_session),
    patients: PatientsDataAccess = Depends(get_patients_data),
) -> Response:
    """Live-search fragment. Keystrokes inside the debounce window share one query."""
    state = SearchQueryState.from_query_params(request.query_params)
    params = state.list_params(config.page_size)

    result = await session.search_debouncer.call(lambda: patients.get_all_patients(params))

    context = table_context(state, result, config)
    context.update(fragment=True, toasts=session.pop_toasts())
    response = templates.TemplateResponse(request, "patients/_table.html", context)
    response.headers["X-List-Url"] = context["current_url"]
    return response


@router.post("/patients/{patient_id}/delete", tags=["Patients"])
async def delete_patient(
    patient_id: str,
    request: Request,
    patients: PatientsDataAccess = Depends(get_patients_data),
) -> Response:
    """Delete after the confirmation dialog was accepted, then go back to the list."""
    form = await request.form()
    return_to = safe_return_to(form.get("returnTo"))

    logger.info(f"Deleting patient {patient_id}")
    await patients.delete_patient(patient_id)
    return RedirectResponse(return_to, status_code=303)


def render_form(
    request: Request,
    session: BrowserSession,
    *,
    patient_id: str | None,
    editing: bool,
    values: dict[str, Any],
    return_to: str,
    errors: dict[str, str] | None = None,
    status_code: int = 200,
) -> Response:
    context = {
        "patient_id": patient_id,
        "editing": editing,
        "values": values,
        "errors": errors or {},
        "genders": list(Gender),
        "max_birth_date": date.today().isoformat(),
        "return_to": return_to,
        "toasts": session.pop_toasts(),
    }
    return templates.TemplateResponse(request, "patients/form.html", context, status_code=status_code)


@router.get("/create", response_class=HTMLResponse, tags=["Patients"])
async def patient_form(
    request: Request,
    session: BrowserSession = Depends(get_browser_session),
    patients: PatientsDataAccess = Depends(get_patients_data),
) -> Response:
    """Create form, or update form pre-populated when ``patientId`` is given."""
    patient_id = request.query_params.get("patientId") or None
    return_to = safe_return_to(request.query_params.get("returnTo"))

    result = await patients.get_patient_by_id(patient_id)
    existing = result.data
    values = initial_form_values(existing) if existing else {}

    return render_form(
        request,
        session,
        patient_id=patient_id,
        editing=bool(patient_id and existing),
        values=values,
        return_to=return_to,
    )


@router.post("/create", response_class=HTMLResponse, tags=["Patients"])
async def submit_patient_form(
    request: Request,
    session: BrowserSession = Depends(get_browser_session),
    patients: PatientsDataAccess = Depends(get_patients_data),
) -> Response:
    """Validate the form, then create or update and return to the previous view."""
    form = await request.form()
    raw_values = {name: form.get(name, "") for name in FORM_FIELDS}
    patient_id = form.get("patientId") or None
    return_to = safe_return_to(form.get("returnTo"))

    try:
        values = PatientFormValues.model_validate(raw_values)
    except ValidationError as e:
        logger.warning(f"Rejected patient form: {form_errors(e)}")
        return render_form(
            request,
            session,
            patient_id=patient_id,
            editing=bool(patient_id),
            values=raw_values,
            return_to=return_to,
            errors=form_errors(e),
            status_code=422,
        )

    existing = None
    if patient_id:
        existing = (await patients.get_patient_by_id(patient_id)).data

    payload = build_patient_payload(values, existing)

    if patient_id and existing:
        result = await patients.update_patient(patient_id, merge_patient_payload(existing, payload))
    elif patient_id:
        # Load failure was already reported; never create in its place
        result = None
    else:
        result = await patients.create_patient(payload)

    if result is not None and result.ok:
        return RedirectResponse(return_to, status_code=303)

    return render_form(
        request,
        session,
        patient_id=patient_id,
        editing=bool(patient_id and existing),
        values=raw_values,
        return_to=return_to,
    )
