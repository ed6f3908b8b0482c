"""
GuildEvents: signed synchronisation of event listings from an S3 bucket.

Fetches the published events and organisations JSON documents over a
hand-rolled AWS SigV4 signer and only re-downloads them when the bucket
reports a newer modification time than the local cache holds.
"""

__version__ = "1.0.0"
