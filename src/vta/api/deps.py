"""Centralized FastAPI dependency type aliases.

Import these ``*Dep`` aliases in route modules instead of writing
``Annotated[T, Depends(get_xxx)]`` everywhere.  Each alias maps to a
single ``get_*`` factory that tests can replace via
``app.dependency_overrides[get_xxx] = ...``.
"""

from typing import Annotated

from fastapi import Depends

from vta.configs.config import get_chat_config
from vta.configs.system import ChatConfig
from vta.core.service.deps import get_chat_service
from vta.core.service.models import ChatService
from vta.infra.db.deps import get_interaction_repository
from vta.infra.db.repository import InteractionRepository

ChatConfigDep = Annotated[ChatConfig, Depends(get_chat_config)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
InteractionRepositoryDep = Annotated[
    InteractionRepository, Depends(get_interaction_repository)
]
