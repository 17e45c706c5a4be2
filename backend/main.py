import logging
from typing import Optional
from fastapi import FastAPI, Depends, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from db import Base, engine, get_db
from schemas import *
from config import ORIGINS, LOG_LEVEL, PAGE_SIZE, AUTH_COOKIE_NAME
from security import verify_dashboard, authenticate, auth_state, AuthState, COOKIE_MAX_AGE
from store import ResponseStore
from questions import QUESTIONS
import form
import listing
import exporter
import views

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Client Survey API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Base.metadata.create_all(bind=engine)


def build_dashboard_state(db: Session, search: str = "", page: int = 1, page_size: int = PAGE_SIZE,
                          view: str = "card", selected: Optional[int] = None) -> listing.DashboardState:
    """Load all responses and replay the dashboard events carried by the request.

    Args:
        db (Session): DB session.
        search (str): Name/email search term.
        page (int): 1-based page number (clamped).
        page_size (int): Items per page.
        view (str): "card" or "table".
        selected (int|None): Response id for the detail overlay.

    Returns:
        listing.DashboardState: State with records loaded (or load_error set).
    """
    state = listing.DashboardState(page_size=page_size)
    state = listing.load(state, ResponseStore(db))
    state = listing.set_search(state, search)
    state = listing.go_to_page(state, page)
    state = listing.set_view(state, view if view in listing.VIEW_MODES else "card")
    if selected is not None:
        state = listing.select(state, selected)
    return state


def _filtered_or_503(db: Session, search: str) -> list:
    state = build_dashboard_state(db, search=search)
    if state.load_error:
        raise HTTPException(503, state.load_error)
    return state.filtered


@app.get("/health")
def health():
    """Basic readiness probe.

    Returns:
        dict: {"ok": True}
    """
    return {"ok": True}

# ------------------------
# Public: survey form
# ------------------------
@app.get("/", response_class=HTMLResponse)
def survey_page():
    return views.render_survey()

@app.get("/thank-you", response_class=HTMLResponse)
def thank_you_page():
    return views.render_thank_you()

@app.get("/api/questions", response_model=list[QuestionOut])
def list_questions():
    return [{"key": k, "label": label} for k, label in QUESTIONS]

@app.post("/api/responses", status_code=201)
def submit_response(payload: SurveyResponseCreate, db: Session = Depends(get_db)):
    """Validate and store one survey response.

    Args:
        payload (SurveyResponseCreate): {name, email, responses{key: 0..5}, suggestions}.
        db (Session): DB session.

    Returns:
        dict: {"id": <new_response_id>, "redirect": "/thank-you"}

    Raises:
        HTTPException: 422 with {"errors": {field: message}} when validation fails;
            503 when the store rejects the insert.
    """
    state = form.FormState.blank()
    unknown = {}
    for name in ("name", "email", "suggestions"):
        state = form.update_field(state, name, getattr(payload, name))
    for key, value in payload.responses.items():
        try:
            state = form.update_field(state, key, value)
        except form.UnknownFieldError:
            unknown[key] = "Unknown question"
    if unknown:
        raise HTTPException(422, {"errors": unknown})

    outcome = form.submit(state, ResponseStore(db))
    if outcome.status == "invalid":
        raise HTTPException(422, {"errors": outcome.errors})
    if outcome.status != "submitted":
        raise HTTPException(503, outcome.message or form.SUBMIT_FAILED_MESSAGE)
    return {"id": outcome.record.id, "redirect": outcome.redirect}

# ------------------------
# Dashboard gate
# ------------------------
@app.post("/api/dashboard/login")
def dashboard_login(body: DashboardLogin, response: Response, request: Request):
    """Check the dashboard password and persist the authenticated flag as a cookie.

    Raises:
        HTTPException: 401 "Incorrect password." on mismatch.
    """
    state, error = authenticate(auth_state(request), body.password)
    if state is not AuthState.AUTHENTICATED:
        raise HTTPException(401, error)
    response.set_cookie(AUTH_COOKIE_NAME, "true", max_age=COOKIE_MAX_AGE, httponly=True, samesite="lax")
    logger.info("Dashboard login accepted")
    return {"ok": True}

@app.get("/responses", response_class=HTMLResponse)
def dashboard_page(request: Request, search: str = "", page: int = 1, view: str = "card",
                   selected: Optional[int] = None, db: Session = Depends(get_db)):
    """Dashboard page; shows the password form until the gate is passed."""
    if auth_state(request) is not AuthState.AUTHENTICATED:
        return views.render_login()
    state = build_dashboard_state(db, search=search, page=page, view=view, selected=selected)
    return views.render_dashboard(state)

# ------------------------
# Dashboard: view/export responses
# ------------------------
@app.get("/api/responses/export.csv", dependencies=[Depends(verify_dashboard)])
def export_csv(search: str = "", db: Session = Depends(get_db)):
    """Export the filtered responses as CSV.

    Args:
        search (str): Name/email search term applied before export.
        db (Session): DB session.

    Returns:
        Response: text/csv attachment `survey_responses_<timestamp>.csv`.
    """
    records = _filtered_or_503(db, search)
    csv_bytes = exporter.to_csv(records).encode("utf-8")
    filename = exporter.export_filename("csv")
    return Response(content=csv_bytes, media_type="text/csv",
                    headers={"Content-Disposition": f"attachment; filename={filename}"})

@app.get("/api/responses/export.pdf", dependencies=[Depends(verify_dashboard)])
def export_pdf(search: str = "", db: Session = Depends(get_db)):
    """Export the filtered responses as a PDF table.

    Returns:
        Response: application/pdf attachment `survey_responses_<timestamp>.pdf`.
    """
    records = _filtered_or_503(db, search)
    filename = exporter.export_filename("pdf")
    return Response(content=exporter.to_pdf(records), media_type="application/pdf",
                    headers={"Content-Disposition": f"attachment; filename={filename}"})

@app.get("/api/responses", response_model=ResponsePage, dependencies=[Depends(verify_dashboard)])
def list_responses(search: str = "", page: int = 1, page_size: int = PAGE_SIZE, db: Session = Depends(get_db)):
    """Return one page of responses matching the search term, newest first.

    Args:
        search (str): Case-insensitive substring matched against name or email.
        page (int): 1-based page number; out-of-range values are clamped.
        page_size (int): Items per page.
        db (Session): DB session.

    Returns:
        ResponsePage: {items, page, page_size, total, total_pages, search}

    Raises:
        HTTPException: 400 for a non-positive page_size; 503 if responses cannot be loaded.
    """
    if page_size < 1:
        raise HTTPException(400, "page_size must be positive")
    state = build_dashboard_state(db, search=search, page=page, page_size=page_size)
    if state.load_error:
        raise HTTPException(503, state.load_error)
    p = state.current_page
    return {
        "items": p.items,
        "page": p.page,
        "page_size": p.page_size,
        "total": p.total,
        "total_pages": p.total_pages,
        "search": state.search,
    }

@app.get("/api/responses/{response_id}", response_model=SurveyResponseOut, dependencies=[Depends(verify_dashboard)])
def response_detail(response_id: int, db: Session = Depends(get_db)):
    """Full detail of one response.

    Raises:
        HTTPException: 404 if no response has this id; 503 if responses cannot be loaded.
    """
    state = build_dashboard_state(db, selected=response_id)
    if state.load_error:
        raise HTTPException(503, state.load_error)
    if state.selected is None:
        raise HTTPException(404, "Response not found")
    return state.selected
