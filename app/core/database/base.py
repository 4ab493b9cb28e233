# File: app/core/database/base.py

from sqlalchemy.orm import declarative_base

# Shared registry for the job record, transcript segments and enrichment queue tables.
Base = declarative_base()
