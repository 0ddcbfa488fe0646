from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse

from quote_dashboard.schemas.dashboard import DashboardState, DashboardView
from quote_dashboard.services.dashboard_state import visible_quotes, with_query
from quote_dashboard.views.render import ERROR_HINT, render_content, render_page

router = APIRouter()
pages = APIRouter()


def _state_for(request: Request, q: str) -> DashboardState:
    # per-request query; the stored state is never mutated by a search
    return with_query(request.app.state.dashboard_store.snapshot(), q)


@pages.get('/', response_class=HTMLResponse)
def index(request: Request, q: str = ''):
    state = _state_for(request, q)
    return render_page(state, visible_quotes(state))


@pages.get('/fragments/content', response_class=HTMLResponse)
def content_fragment(request: Request, q: str = ''):
    state = _state_for(request, q)
    return render_content(state, visible_quotes(state))


@pages.get('/healthz')
def healthz():
    return {'ok': True}


@router.get('/dashboard', response_model=DashboardView)
def get_dashboard(request: Request, q: str = ''):
    state = _state_for(request, q)
    return DashboardView(
        status=state.status,
        query=state.query,
        quotes=visible_quotes(state),
        total=len(state.quotes),
        error=state.error,
        hint=ERROR_HINT if state.status == 'FAILED' else None,
    )


@router.get('/quotes')
def get_quotes(request: Request, q: str = ''):
    state = _state_for(request, q)
    if state.status == 'LOADING':
        raise HTTPException(status_code=503, detail='QUOTES_LOADING')
    if state.status == 'FAILED':
        raise HTTPException(status_code=502, detail=state.error)
    return [row.model_dump() for row in visible_quotes(state)]


@router.get('/metrics/quote')
def quote_metrics(request: Request):
    state = request.app.state.dashboard_store.snapshot()
    metrics = {
        'status': state.status,
        'quote_count': len(state.quotes),
        'loader_started': request.app.state.quote_loader.started,
    }
    metrics.update(request.app.state.load_timeline.metrics())
    fetcher = getattr(request.app.state, 'quote_fetcher', None)
    if fetcher is not None:
        metrics.update(fetcher.metrics())
    return metrics
