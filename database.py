from sqlalchemy import JSON, Column, DateTime, Float, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from config import DATABASE_URL
from models import utc_now

# Database Setup
# Default to local SQLite, but allow override for a hosted Postgres
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if "sqlite" in DATABASE_URL else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

SETTINGS_ROW_ID = "default"

# --- Models ---

class BudgetSettingsRow(Base):
    __tablename__ = "budget_settings"

    id = Column(String, primary_key=True, default=SETTINGS_ROW_ID)
    total_budget = Column(Float)
    categories = Column(JSON)    # list of {id, name, budget}
    fund_sources = Column(JSON)  # list of {id, name}
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    def to_document(self) -> dict:
        return {
            "total_budget": self.total_budget,
            "categories": self.categories,
            "fund_sources": self.fund_sources,
        }

class TransactionRow(Base):
    __tablename__ = "transactions"

    id = Column(String, primary_key=True, index=True)
    fund = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    category = Column(String, nullable=False, index=True)
    date = Column(DateTime, nullable=False, index=True)  # naive UTC

    def to_document(self) -> dict:
        return {
            "id": self.id,
            "fund": self.fund,
            "amount": self.amount,
            "category": self.category,
            "date": self.date.isoformat(),
        }

# --- Init DB ---
def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
