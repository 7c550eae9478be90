# backend/tests/services/test_response_and_settings.py
import asyncio

import pytest

from roombridge.modules.responses.services.response_service import validate_response_content
from roombridge.shared.utils.exceptions import ConflictError, EntityNotFoundError, ValidationFailedError


# --- CANNED RESPONSES ---

def test_validate_response_content():
    validate_response_content("image", None)
    validate_response_content("text", "hola")
    with pytest.raises(ValidationFailedError):
        validate_response_content("text", "   ")
    with pytest.raises(ValidationFailedError):
        validate_response_content("video", "hola")


def test_response_crud(services):
    async def test_logic():
        created = await services.responses.create_response({"atajo": "/hola", "text": "Hola!", "type": "text"})
        assert created["image"] == ""
        assert created["status"] is True

        with pytest.raises(ConflictError):
            await services.responses.create_response({"atajo": "/hola", "text": "Otra", "type": "text"})

        await services.responses.create_response({"atajo": "/precio", "text": "$10", "type": "text"})
        assert [r["atajo"] for r in await services.responses.list_responses(atajo="pre")] == ["/precio"]

        updated = await services.responses.update_response(created["id"], {"text": "Buenas!"})
        assert updated["text"] == "Buenas!"

        with pytest.raises(ConflictError):
            await services.responses.update_response(created["id"], {"atajo": "/precio"})

    asyncio.run(test_logic())


def test_update_response_validates_merged_values(services):
    async def test_logic():
        created = await services.responses.create_response({"atajo": "/logo", "image": "http://img", "type": "image"})
        with pytest.raises(ValidationFailedError):
            await services.responses.update_response(created["id"], {"type": "mixed"})

    asyncio.run(test_logic())


# --- WORKSPACE SETTINGS ---

def test_settings_not_found_until_saved(services):
    async def test_logic():
        with pytest.raises(EntityNotFoundError) as exc:
            await services.settings.get_settings()
        assert exc.value.message == "Settings not found"

        saved = await services.settings.save_settings({
            "display_name": "Tienda",
            "description": "Atencion al cliente",
            "welcome_message": "Hola!",
        })
        assert saved["displayName"] == "Tienda"
        assert (await services.settings.get_settings())["welcomeMessage"] == "Hola!"

        await services.settings.save_settings({"welcome_message": "Bienvenido"})
        settings = await services.settings.get_settings()
        assert settings["welcomeMessage"] == "Bienvenido"
        assert settings["displayName"] == "Tienda"

    asyncio.run(test_logic())
