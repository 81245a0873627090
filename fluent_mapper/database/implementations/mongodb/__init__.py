"""MongoDB adapter."""

from .mongodb_adapter import MongoDBAdapter, build_mongo_filter

__all__ = ["MongoDBAdapter", "build_mongo_filter"]
