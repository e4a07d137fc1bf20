"""
Conversion Audit Package.

Audits the conversion tracking of one Google Ads account: collects every
enabled conversion action, aggregates its performance, flags issues and
opportunities, derives a campaign action plan and e-mails an HTML report.

Subpackages:
    - core: Configuration and the Google Ads data source
    - models: Pydantic schemas and enums
    - queries: GAQL query builders
    - services: Aggregation, classification, action plan and report rendering
    - jobs: The audit run and e-mail delivery
"""

__version__ = "1.0.0"
