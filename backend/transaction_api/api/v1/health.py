from fastapi import APIRouter
from transaction_api.schemas.simple import Health

router = APIRouter()

@router.get('/health', response_model=Health)
def health():
    return {'status': 'ok'}
