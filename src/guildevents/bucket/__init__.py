"""Signed access to the events bucket."""

from guildevents.bucket.blocking import BlockingBucketClient
from guildevents.bucket.client import BucketClient
from guildevents.bucket.results import Body, Failure, FetchResult, LastModified, Resource
from guildevents.bucket.signer import Credentials, compute_authorization_header
from guildevents.bucket.sync import ResourceSynchronizer, SyncOutcome, SyncStatus

__all__ = [
    "BlockingBucketClient",
    "Body",
    "BucketClient",
    "Credentials",
    "Failure",
    "FetchResult",
    "LastModified",
    "Resource",
    "ResourceSynchronizer",
    "SyncOutcome",
    "SyncStatus",
    "compute_authorization_header",
]
