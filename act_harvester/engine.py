"""
Harvester engine - one batch run over all converting search terms.

For each enabled campaign matching the name filter, every uncovered converting
search term goes through:

    normalize -> classify language -> resolve candidates -> pick ad group -> add keywords

Afterwards all keywords created in the run get the day label, and the ledger is
written to the report sink.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from .classifier import classify_language
from .config import HarvesterConfig
from .google_ads_api import build_date_range
from .keywords import KeywordMutator
from .labels import apply_run_label, build_label_name
from .ledger import RunContext, RunLedger
from .logging_config import setup_logging
from .matcher import select_best_match
from .models import Campaign, Language, SearchTerm
from .normalizer import unique_terms
from .resolver import CandidateResolver, NamingConvention

logger = setup_logging(__name__)


@dataclass
class RunSummary:
    campaigns_processed: int
    terms_processed: int
    keywords_created: int
    report_rows: int
    keywords_labeled: int
    label_name: Optional[str]
    report_table: Optional[str]


class KeywordHarvester:
    """
    Runs the search-term triage pipeline against one account.

    Collaborators:
        platform: enumeration source, keyword-mutation sink and label sink
            (GoogleAdsPlatform or a test double with the same methods)
        oracle: ChatOracle-like object with complete(system, prompt) -> str
        report_sink: DuckDBReportSink-like object, or None if not configured
    """

    def __init__(
        self,
        config: HarvesterConfig,
        platform,
        oracle,
        report_sink=None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        self.platform = platform
        self.oracle = oracle
        self.report_sink = report_sink
        self.clock = clock
        self.convention = NamingConvention(config.campaign_name_filter, config.language_markers)
        self.mutator = KeywordMutator(platform, config.default_bid)

    def _new_context(self) -> RunContext:
        ledger = RunLedger() if self.clock is None else RunLedger(clock=self.clock)
        return RunContext(ledger=ledger, resolver=CandidateResolver(self.platform, self.convention))

    def run(self, today: Optional[date] = None) -> RunSummary:
        context = self._new_context()
        ledger = context.ledger

        account = {"name": self.config.customer_id, "time_zone": "UTC"}
        campaigns_processed = 0
        labeled = 0
        label_name: Optional[str] = None
        report_table: Optional[str] = None

        try:
            account = self.platform.get_account_info()
            date_range = build_date_range(self.config.lookback_days, account.get("time_zone"), today=today)
            ledger.log(
                f"Starting run for account '{account['name']}' "
                f"(campaign filter '{self.config.campaign_name_filter}', date range {date_range})"
            )

            campaigns = self.platform.list_campaigns(self.config.campaign_name_filter)
            if not campaigns:
                ledger.log(
                    f"No enabled campaigns found containing '{self.config.campaign_name_filter}'. Run terminated."
                )
            else:
                for campaign in campaigns:
                    self.process_campaign(campaign, date_range, context)
                    campaigns_processed += 1

                label_name = build_label_name(
                    self.config.label_prefix, account.get("time_zone"), now=self._now()
                )
                labeled = apply_run_label(
                    self.platform,
                    context.created_keywords,
                    ledger,
                    label_name,
                    self.config.label_description,
                )
        except Exception as e:
            ledger.error(f"FATAL ERROR: Run stopped early. Details: {e}")
            raise
        finally:
            report_table = ledger.flush(self.report_sink, account["name"])

        summary = RunSummary(
            campaigns_processed=campaigns_processed,
            terms_processed=context.terms_processed,
            keywords_created=len(context.created_keywords),
            report_rows=len(ledger.report_rows),
            keywords_labeled=labeled,
            label_name=label_name if context.created_keywords else None,
            report_table=report_table,
        )
        logger.info(
            f"Run complete: terms={summary.terms_processed}, "
            f"keywords_created={summary.keywords_created}, report_rows={summary.report_rows}"
        )
        return summary

    def _now(self) -> Optional[datetime]:
        return self.clock() if self.clock is not None else None

    def process_campaign(self, campaign: Campaign, date_range: str, context: RunContext) -> None:
        context.ledger.log(f"Processing Campaign: {campaign.name}")
        terms = self.platform.get_search_terms(campaign.id, date_range)
        for term in unique_terms(terms, context.ledger):
            self.process_search_term(term, context)

    def process_search_term(self, term: SearchTerm, context: RunContext) -> None:
        ledger = context.ledger
        context.terms_processed += 1

        lang = classify_language(self.oracle, term, ledger)

        candidates = context.resolver.resolve_candidates(lang, ledger)
        if candidates.is_empty():
            return

        best = select_best_match(self.oracle, term, candidates.ordered_names, ledger)
        if lang is Language.OTHER:
            ledger.log(f"For 'other' search term \"{term.text}\", best matching ad group name is: {best}")
        else:
            ledger.log(f"For search term \"{term.text}\", best matching ad group name is: {best}")

        for ad_group in candidates.groups_for(best):
            added = self.mutator.add_keywords(ad_group, term, context)
            if added:
                ledger.record_report_row(ad_group.campaign_name, ad_group.name, added)
            else:
                ledger.log(
                    f"No keywords added for \"{term.text}\" to Ad Group '{ad_group.name}' "
                    f"(campaign '{ad_group.campaign_name}')."
                )
