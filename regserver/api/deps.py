"""
regserver/api/deps.py

Purpose: FastAPI dependencies

- Builds a RegistrationService per request around the shared users collection
"""

from regserver.db.mongo import get_users_collection
from regserver.services.registration_service import RegistrationService


def get_registration_service() -> RegistrationService:
    return RegistrationService(get_users_collection())
