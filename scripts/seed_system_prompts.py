"""Siembra los prompts de sistema (idempotente).

Uso:
  PYTHONPATH=. python scripts/seed_system_prompts.py
"""
from __future__ import annotations

import logging

from app.core.config import settings
from app.core.logging import setup_logging
from app.infrastructure.db.mongo import get_db, init_mongo
from app.services.prompt_service import PromptService


def main() -> None:
    setup_logging(settings.log_level)
    init_mongo()
    out = PromptService(get_db(), settings.system_user_id).initialize_system_prompts()
    logging.getLogger("maple.prompts").info("%s (count=%s)", out["message"], out["count"])


if __name__ == "__main__":
    main()
