"""
Market Digest Services

Service layer containing the report pipeline stages.
Each stage has a defined contract and implementation.
"""

from market_digest.services.base import BaseService, ServiceError
from market_digest.services.pipeline import ReportPipeline, build_pipeline

__all__ = ["BaseService", "ServiceError", "ReportPipeline", "build_pipeline"]
