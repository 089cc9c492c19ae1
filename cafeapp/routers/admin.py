from fastapi import APIRouter, Depends

from cafeapp.core.config import settings
from cafeapp.core.context import StaffSession
from cafeapp.core.errors import CafeError
from cafeapp.core.schemas import PreferencesIn
from cafeapp.deps import current_session, get_preferences, http_error
from cafeapp.models.records import StorePreferences
from cafeapp.services.repository import PreferencesRepository

router = APIRouter(prefix="/admin", tags=["admin"])


def _serialize(p: StorePreferences) -> dict:
    doc = p.to_doc()
    doc["min_order"] = float(p.min_order)
    doc["tip_presets"] = [float(t) for t in p.tip_presets]
    return doc


@router.get("/context", summary="Contexto de tienda")
def get_context():
    return {
        "app": settings.app_name,
        "env": settings.app_env,
        "version": settings.app_version,
        "store": settings.store_name,
        "currency": settings.currency,
        "store_backend": settings.store_backend,
        "page_size": settings.page_size,
    }


@router.get("/preferences", summary="Preferencias de tienda")
def get_preferences_doc(prefs: PreferencesRepository = Depends(get_preferences)):
    return _serialize(prefs.get())


@router.put("/preferences", summary="Actualizar preferencias de tienda")
def update_preferences(
    payload: PreferencesIn,
    prefs: PreferencesRepository = Depends(get_preferences),
    session: StaffSession = Depends(current_session),
):
    current = prefs.get()
    changes = payload.model_dump(exclude_none=True)
    if "payment_methods" in changes:
        changes["payment_methods"] = {**current.payment_methods, **changes["payment_methods"]}
    try:
        updated = StorePreferences.from_doc({**current.model_dump(), **changes})
        return _serialize(prefs.save(updated))
    except CafeError as e:
        raise http_error(e)
