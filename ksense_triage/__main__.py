"""
Command-line interface for ksense-triage.

    ksense-triage analyze [--json] [--details]
                                     fetch + classify, print counts / id lists
    ksense-triage submit             fetch + classify + submit, print the score
"""

import json
import logging
import sys

import click

from .client import AssessmentClient
from .config import DEFAULT_BASE_URL, DEFAULT_PAGE_LIMIT, AssessmentConfig
from .errors import ConfigurationError
from .models import SubmissionResult
from .session import AssessmentSession


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _connection_options(f):
    options = [
        click.option("--api-key", envvar="KSENSE_API_KEY", required=True,
                     help="assessment API key (env: KSENSE_API_KEY)"),
        click.option("--base-url", envvar="KSENSE_BASE_URL", default=DEFAULT_BASE_URL,
                     show_default=True, help="API root (env: KSENSE_BASE_URL)"),
        click.option("--page-limit", default=DEFAULT_PAGE_LIMIT, show_default=True,
                     type=click.IntRange(min=1), help="records requested per page"),
        click.option("--max-retries", default=3, show_default=True,
                     type=click.IntRange(min=0), help="retries per call on 429/5xx/network errors"),
        click.option("--base-delay", default=1.0, show_default=True,
                     type=click.FloatRange(min=0), help="first backoff delay in seconds"),
        click.option("--verbose", is_flag=True, help="log every page fetch and retry"),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def _build_session(
    api_key: str, base_url: str, page_limit: int, max_retries: int, base_delay: float
) -> AssessmentSession:
    try:
        config = AssessmentConfig(
            api_key=api_key,
            base_url=base_url,
            page_limit=page_limit,
            max_retries=max_retries,
            base_delay=base_delay,
        )
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    return AssessmentSession(AssessmentClient(config))


def _load(session: AssessmentSession) -> None:
    click.echo("Fetching patients...")
    if not session.load():
        click.echo(f"Error: {session.error_message}", err=True)
        sys.exit(1)
    summary = session.summary
    click.echo(f"Got {summary.total_patients} patients")
    click.echo(f"High risk:           {summary.high_risk_count}")
    click.echo(f"Fever:               {summary.fever_count}")
    click.echo(f"Data quality issues: {summary.data_quality_count}")


def _raw(value) -> str:
    return "N/A" if value is None or value == "" else str(value)


def _report_details(session: AssessmentSession) -> None:
    # one row per patient, then the three lists that would be submitted
    click.echo("")
    click.echo(f"{'ID':10} {'NAME':20} {'AGE':>6} {'BP':>9} {'TEMP':>7}  SCORE")
    for c in session.classifications:
        p, score = c.patient, c.risk_score
        line = (
            f"{p.patient_id:10} {_raw(p.name)[:20]:20} {_raw(p.age):>6} "
            f"{_raw(p.blood_pressure):>9} {_raw(p.temperature):>7}  "
            f"{score.total:2} (BP:{score.blood_pressure} T:{score.temperature} A:{score.age})"
        )
        badges = []
        if c.is_high_risk:
            badges.append(click.style("HIGH RISK", fg="red"))
        if c.has_fever:
            badges.append(click.style("FEVER", fg="yellow"))
        if c.has_data_quality_issues:
            badges.append(click.style("DATA ISSUE", fg="cyan"))
        click.echo(" ".join([line] + badges))

    results = session.results
    click.echo("")
    for label, ids in (
        ("High risk patients", results.high_risk_patients),
        ("Fever patients", results.fever_patients),
        ("Data quality issues", results.data_quality_issues),
    ):
        click.echo(f"{label}: {', '.join(ids) if ids else 'None'}")


def _report_submission(result: SubmissionResult) -> None:
    click.echo(f"Status: {result.status or ('ok' if result.success else 'failed')}")
    if result.message:
        click.echo(result.message)
    click.echo(f"Score: {result.score} ({result.percentage}%)")
    for name, b in result.breakdown.items():
        click.echo(
            f"  {name:13} {b.score}/{b.max}  correct={b.correct} "
            f"submitted={b.submitted} matches={b.matches}"
        )
    for s in result.strengths:
        click.echo(click.style(f"+ {s}", fg="green"))
    for i in result.issues:
        click.echo(click.style(f"- {i}", fg="yellow"))
    if result.attempt_number is not None:
        click.echo(
            f"Attempt {result.attempt_number}, {result.remaining_attempts} remaining"
            + (" (personal best)" if result.is_personal_best else "")
        )


@click.group()
def main():
    """Fetch patient records, classify their risk and submit the assessment."""
    pass


@main.command(name="analyze")
@_connection_options
@click.option("--json", "as_json", is_flag=True, help="print the three id lists as JSON")
@click.option("--details", is_flag=True, help="also print one row per patient and the id lists")
def analyze(
    api_key: str,
    base_url: str,
    page_limit: int,
    max_retries: int,
    base_delay: float,
    verbose: bool,
    as_json: bool,
    details: bool,
):
    """
    Fetch every page of patients and print the classification counts.
    """
    configure_logging(verbose)
    session = _build_session(api_key, base_url, page_limit, max_retries, base_delay)
    if as_json:
        if not session.load():
            click.echo(f"Error: {session.error_message}", err=True)
            sys.exit(1)
        click.echo(json.dumps(session.results.to_payload(), indent=2))
        return
    _load(session)
    if details:
        _report_details(session)


@main.command(name="submit")
@_connection_options
def submit(
    api_key: str,
    base_url: str,
    page_limit: int,
    max_retries: int,
    base_delay: float,
    verbose: bool,
):
    """
    Fetch, classify and submit the three id lists; print the server's verdict.
    """
    configure_logging(verbose)
    session = _build_session(api_key, base_url, page_limit, max_retries, base_delay)
    _load(session)

    click.echo("Submitting...")
    if not session.submit():
        click.echo(f"Error: {session.error_message}", err=True)
        sys.exit(1)
    _report_submission(session.submission)


if __name__ == "__main__":
    main()
