"""
Google Ads API integration for the keyword harvester.

Handles:
- Client authentication
- Enumeration (account, campaigns, ad groups, existing keywords, search terms)
- Keyword creation (exact / phrase)
- Label lookup, creation and assignment
- Dry-run simulation of every mutation
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from google.ads.googleads.client import GoogleAdsClient
from google.ads.googleads.errors import GoogleAdsException

from .errors import MutationRejected
from .logging_config import setup_logging
from .models import (
    AdGroupCandidate,
    Campaign,
    ExistingKeywords,
    KeywordMutationRequest,
    KeywordRecord,
    Label,
    MatchType,
    SearchTerm,
)

logger = setup_logging(__name__)


def load_google_ads_client(config_path: str) -> GoogleAdsClient:
    """
    Load Google Ads API client from YAML configuration.

    Args:
        config_path: Path to google-ads.yaml file

    Returns:
        GoogleAdsClient instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    logger.info(f"Loading Google Ads client from {config_path}")

    try:
        client = GoogleAdsClient.load_from_storage(config_path)
        logger.info("Google Ads client loaded successfully")
        return client
    except FileNotFoundError:
        logger.error(f"Config file not found: {config_path}")
        raise
    except Exception as e:
        logger.error(f"Failed to load Google Ads client: {str(e)}")
        raise


# ============================================================================
# DATE HELPERS
# ============================================================================


def build_date_range(lookback_days: int, time_zone: Optional[str] = None, today: Optional[date] = None) -> str:
    """
    Date range string for the search-term feed, e.g. "20261012,20261019".

    Args:
        lookback_days: Number of days to go back from today
        time_zone: Account time zone (IANA name); UTC if missing or unknown
        today: Override for "today" (tests)
    """
    if lookback_days < 1:
        raise ValueError(f"lookback_days must be >= 1, got {lookback_days}")

    if today is None:
        tz = timezone.utc
        if time_zone:
            try:
                tz = ZoneInfo(time_zone)
            except ZoneInfoNotFoundError:
                logger.warning(f"Unknown time zone '{time_zone}', using UTC")
        today = datetime.now(tz).date()

    start = today - timedelta(days=lookback_days)
    return f"{start.strftime('%Y%m%d')},{today.strftime('%Y%m%d')}"


def parse_date_range(date_range: str) -> Tuple[str, str]:
    """Convert YYYYMMDD,YYYYMMDD into a pair of GAQL dates (YYYY-MM-DD)."""
    parts = date_range.split(",")
    if len(parts) != 2:
        raise ValueError(f"date_range must be YYYYMMDD,YYYYMMDD, got {date_range!r}")
    out = []
    for p in parts:
        d = datetime.strptime(p.strip(), "%Y%m%d").date()
        out.append(d.isoformat())
    return out[0], out[1]


def _gaql_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _error_reasons(ex: GoogleAdsException) -> List[str]:
    reasons = [error.message for error in ex.failure.errors]
    if not reasons:
        reasons = [str(ex)]
    return reasons


# ============================================================================
# PLATFORM ADAPTER
# ============================================================================


class GoogleAdsPlatform:
    """
    Enumeration source, keyword-mutation sink and label sink for one account.

    In dry-run mode reads hit the API as usual, mutations are only logged and
    return simulated resource names.
    """

    def __init__(self, client: GoogleAdsClient, customer_id: str, dry_run: bool = True):
        self.client = client
        self.customer_id = customer_id
        self.dry_run = dry_run
        self._simulated_labels: Dict[str, Label] = {}

        mode = "DRY-RUN" if dry_run else "LIVE"
        logger.info(f"GoogleAdsPlatform initialized: customer_id={customer_id}, mode={mode}")

    def _search(self, query: str):
        ga_service = self.client.get_service("GoogleAdsService")
        return ga_service.search(customer_id=self.customer_id, query=query)

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def get_account_info(self) -> Dict[str, str]:
        query = """
            SELECT
                customer.id,
                customer.descriptive_name,
                customer.time_zone
            FROM customer
            LIMIT 1
        """
        try:
            for row in self._search(query):
                return {
                    "name": row.customer.descriptive_name or self.customer_id,
                    "time_zone": row.customer.time_zone or "UTC",
                }
        except GoogleAdsException as ex:
            logger.error(f"Failed to fetch account info: {ex}")
            raise
        return {"name": self.customer_id, "time_zone": "UTC"}

    def list_campaigns(self, name_filter: str) -> List[Campaign]:
        """Enabled campaigns whose name contains name_filter (case-insensitive)."""
        query = """
            SELECT
                campaign.id,
                campaign.name
            FROM campaign
            WHERE campaign.status = 'ENABLED'
            ORDER BY campaign.id
        """
        needle = name_filter.lower()
        try:
            return [
                Campaign(id=str(row.campaign.id), name=row.campaign.name)
                for row in self._search(query)
                if needle in row.campaign.name.lower()
            ]
        except GoogleAdsException as ex:
            logger.error(f"Failed to fetch campaigns: {ex}")
            raise

    def list_ad_groups(self, campaign: Campaign) -> List[AdGroupCandidate]:
        query = f"""
            SELECT
                ad_group.id,
                ad_group.name
            FROM ad_group
            WHERE campaign.id = {int(campaign.id)}
                AND ad_group.status = 'ENABLED'
            ORDER BY ad_group.id
        """
        try:
            return [
                AdGroupCandidate(
                    id=str(row.ad_group.id),
                    name=row.ad_group.name,
                    campaign_id=campaign.id,
                    campaign_name=campaign.name,
                )
                for row in self._search(query)
            ]
        except GoogleAdsException as ex:
            logger.error(f"Failed to fetch ad groups for campaign {campaign.id}: {ex}")
            raise

    def get_existing_keywords(self, ad_group_id: str) -> ExistingKeywords:
        query = f"""
            SELECT
                ad_group_criterion.keyword.text,
                ad_group_criterion.keyword.match_type
            FROM ad_group_criterion
            WHERE ad_group_criterion.ad_group = 'customers/{self.customer_id}/adGroups/{ad_group_id}'
                AND ad_group_criterion.type = 'KEYWORD'
                AND ad_group_criterion.negative = FALSE
                AND ad_group_criterion.status != 'REMOVED'
        """
        existing = ExistingKeywords()
        try:
            for row in self._search(query):
                match_type = MatchType.parse(row.ad_group_criterion.keyword.match_type.name)
                if match_type is not None:
                    existing.add(match_type, row.ad_group_criterion.keyword.text)
        except GoogleAdsException as ex:
            logger.error(f"Failed to fetch ad group keywords: {ex}")
            raise
        return existing

    def get_search_terms(self, campaign_id: str, date_range: str) -> List[SearchTerm]:
        """Converting search terms not yet added as keywords, in feed order."""
        start, end = parse_date_range(date_range)
        query = f"""
            SELECT
                search_term_view.search_term,
                search_term_view.status,
                metrics.conversions
            FROM search_term_view
            WHERE campaign.id = {int(campaign_id)}
                AND search_term_view.status = 'NONE'
                AND metrics.conversions > 0
                AND segments.date BETWEEN '{start}' AND '{end}'
        """
        try:
            return [
                SearchTerm(
                    text=row.search_term_view.search_term,
                    campaign_id=str(campaign_id),
                    conversions=float(row.metrics.conversions),
                )
                for row in self._search(query)
            ]
        except GoogleAdsException as ex:
            logger.error(f"Failed to fetch search terms for campaign {campaign_id}: {ex}")
            raise

    # ------------------------------------------------------------------
    # Keyword mutation
    # ------------------------------------------------------------------

    def create_keyword(self, request: KeywordMutationRequest) -> KeywordRecord:
        """
        Add a keyword criterion to an ad group.

        Raises:
            MutationRejected: with the platform's error messages
        """
        bid_micros = int(round(request.bid * 1_000_000))

        if self.dry_run:
            logger.info(
                f"DRY RUN: Would add keyword '{request.text}' ({request.match_type.value}) "
                f"to ad group {request.ad_group_id} with bid {bid_micros}"
            )
            return KeywordRecord(
                ad_group_id=request.ad_group_id,
                text=request.text,
                match_type=request.match_type,
                resource_name=f"simulated_{request.ad_group_id}_{request.text}",
            )

        ad_group_criterion_service = self.client.get_service("AdGroupCriterionService")
        match_type_enum = self.client.enums.KeywordMatchTypeEnum

        try:
            operation = self.client.get_type("AdGroupCriterionOperation")
            criterion = operation.create
            criterion.ad_group = ad_group_criterion_service.ad_group_path(
                self.customer_id, request.ad_group_id
            )
            criterion.status = self.client.enums.AdGroupCriterionStatusEnum.ENABLED
            criterion.keyword.text = request.text
            criterion.keyword.match_type = getattr(match_type_enum, request.match_type.value)
            criterion.cpc_bid_micros = bid_micros

            response = ad_group_criterion_service.mutate_ad_group_criteria(
                customer_id=self.customer_id, operations=[operation]
            )
        except GoogleAdsException as ex:
            logger.error(f"Failed to add keyword: {ex}")
            raise MutationRejected(_error_reasons(ex)) from ex

        resource_name = response.results[0].resource_name
        logger.info(
            f"Added keyword '{request.text}' ({request.match_type.value}) as {resource_name}"
        )
        return KeywordRecord(
            ad_group_id=request.ad_group_id,
            text=request.text,
            match_type=request.match_type,
            resource_name=resource_name,
        )

    # ------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------

    def find_label(self, name: str) -> Optional[Label]:
        query = f"""
            SELECT
                label.resource_name,
                label.name,
                label.text_label.description
            FROM label
            WHERE label.name = '{_gaql_string(name)}'
        """
        try:
            for row in self._search(query):
                if row.label.name == name:
                    return Label(
                        name=row.label.name,
                        resource_name=row.label.resource_name,
                        description=row.label.text_label.description,
                    )
        except GoogleAdsException as ex:
            logger.error(f"Failed to look up label '{name}': {ex}")
            raise
        return self._simulated_labels.get(name)

    def create_label(self, name: str, description: str) -> Label:
        if self.dry_run:
            logger.info(f"DRY RUN: Would create label '{name}'")
            label = Label(name=name, resource_name=f"simulated_label_{name}", description=description)
            self._simulated_labels[name] = label
            return label

        label_service = self.client.get_service("LabelService")
        try:
            operation = self.client.get_type("LabelOperation")
            operation.create.name = name
            operation.create.text_label.description = description
            response = label_service.mutate_labels(
                customer_id=self.customer_id, operations=[operation]
            )
        except GoogleAdsException as ex:
            logger.error(f"Failed to create label '{name}': {ex}")
            raise MutationRejected(_error_reasons(ex)) from ex

        resource_name = response.results[0].resource_name
        logger.info(f"Created label '{name}' as {resource_name}")
        return Label(name=name, resource_name=resource_name, description=description)

    def apply_label(self, record: KeywordRecord, label: Label) -> None:
        if self.dry_run:
            logger.info(f"DRY RUN: Would apply label '{label.name}' to {record.resource_name}")
            return

        service = self.client.get_service("AdGroupCriterionLabelService")
        try:
            operation = self.client.get_type("AdGroupCriterionLabelOperation")
            operation.create.ad_group_criterion = record.resource_name
            operation.create.label = label.resource_name
            service.mutate_ad_group_criterion_labels(
                customer_id=self.customer_id, operations=[operation]
            )
        except GoogleAdsException as ex:
            logger.error(f"Failed to apply label '{label.name}' to {record.resource_name}: {ex}")
            raise MutationRejected(_error_reasons(ex)) from ex
