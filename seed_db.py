from budget_defaults import default_settings
from database import SETTINGS_ROW_ID, BudgetSettingsRow, SessionLocal, init_db
from log_setup import get_logger

logger = get_logger("seed")


def seed_settings(session_factory=SessionLocal, bind=None):
    init_db(bind)
    db = session_factory()
    try:
        # Check if settings exist
        if db.get(BudgetSettingsRow, SETTINGS_ROW_ID) is not None:
            logger.info("Budget settings already exist. Skipping seed.")
            return False

        db.add(BudgetSettingsRow(id=SETTINGS_ROW_ID, **default_settings().model_dump(mode="json")))
        db.commit()
        logger.info("Database initialized with default budget settings.")
        return True
    finally:
        db.close()

if __name__ == "__main__":
    seed_settings()
