"""SPORTSLAKE — Sports statistics data lake pipeline.

Fetches raw statistics from SportsData.io, lands them in S3, catalogs them
with a Glue crawler and queries them with Athena.
"""

__version__ = "0.1.0"
