"""
Contract boilerplate by service category.

The layout engine never sees categories: a caller picks (or detects) a
category, renders the boilerplate into text and hands it over as the
model's contract_body.
"""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from ..engine.formatting import MoneyFormatter, format_date
from ..models.document import DocumentModel

logger = logging.getLogger(__name__)

GENERAL = "general"


@dataclass(frozen=True)
class ContractTemplate:
    category: str
    title: str
    body: str
    defaults: Mapping[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return f"{self.title}\n\n{self.body.strip()}"


_PARTIES_CLAUSE = (
    "Between {provider_name}, with tax ID {provider_tax_id}, domiciled at {provider_address} "
    '(hereinafter "THE {provider_role}"), and {client_name}, with tax ID {client_tax_id}, '
    'domiciled at {client_address} (hereinafter "THE CLIENT"), it is agreed:'
)

_TERM_AND_PRICE = """
SECOND. TERM
{term_sentence} from {start_date} until {end_date}.

THIRD. PRICE AND PAYMENT
The total price {price_subject} is {contract_value} {currency}.
Payment terms: {payment_terms}
"""

_COMMON_DEFAULTS = {
    "payment_terms": "As agreed",
    "contract_value": "0",
    "currency": "EUR",
}


def _template(
    category: str, title: str, role: str, scope_text: str, deliverables_text: str, clauses_text: str, **defaults: str
) -> ContractTemplate:
    body = "\n".join(
        (
            _PARTIES_CLAUSE.replace("{provider_role}", role),
            "",
            scope_text.strip(),
            _TERM_AND_PRICE,
            "FOURTH. DELIVERABLES",
            deliverables_text.strip(),
            "",
            clauses_text.strip(),
        )
    )
    merged = dict(_COMMON_DEFAULTS)
    merged.update(defaults)
    return ContractTemplate(category=category, title=title, body=body, defaults=merged)


DEFAULT_TEMPLATES: Dict[str, ContractTemplate] = {
    template.category: template
    for template in (
        _template(
            "development",
            "SOFTWARE DEVELOPMENT SERVICES CONTRACT",
            "PROVIDER",
            """
FIRST. PURPOSE
THE PROVIDER undertakes to develop and deliver to THE CLIENT the following project:
- Project name: {title}
- Description: {description}
- Technologies: {technologies}
- Main features: {features}
""",
            """
- Complete, documented source code
- Technical documentation
- User manual
- {deliverables}
""",
            """
FIFTH. INTELLECTUAL PROPERTY
Once payment is complete, all intellectual property rights over the specific work are transferred to THE CLIENT.

SIXTH. WARRANTY AND SUPPORT
THE PROVIDER warrants the correct operation of the software and provides technical support for 30 days after delivery.
""",
            description="Custom software development",
            technologies="Current technologies",
            features="As specified",
            deliverables="Additional deliverables as specified",
            term_sentence="The project will run",
            price_subject="of the project",
        ),
        _template(
            "consulting",
            "CONSULTING SERVICES CONTRACT",
            "CONSULTANT",
            """
FIRST. PURPOSE
THE CONSULTANT undertakes to provide professional consulting services:
- Consulting area: {title}
- Description of services: {description}
- Methodology: {methodology}
- Scope: {scope}
""",
            """
- Analysis and diagnosis of the current situation
- Documented strategic recommendations
- Detailed implementation plan
- {deliverables}
""",
            """
FIFTH. CONFIDENTIALITY
THE CONSULTANT keeps all business information it has access to strictly confidential.

SIXTH. LIABILITY
The consultant's liability is limited to professional advice. Results depend on implementation by THE CLIENT.
""",
            description="Specialised consulting services",
            methodology="Professional methodology adapted to the client",
            scope="As agreed",
            deliverables="Reports and documentation within scope",
            term_sentence="The services will be provided",
            price_subject="of the services",
        ),
        _template(
            "marketing",
            "DIGITAL MARKETING SERVICES CONTRACT",
            "PROVIDER",
            """
FIRST. PURPOSE
THE PROVIDER undertakes to carry out digital marketing services:
- Main service: {title}
- Description: {description}
- Channels: {channels}
- Objectives: {objectives}
""",
            """
- Documented marketing strategy
- Management of advertising campaigns
- Monthly results reports
- {deliverables}
""",
            """
FIFTH. ADVERTISING BUDGET
Advertising costs (ad spend) are not included in the service price and are managed by THE CLIENT.

SIXTH. METRICS AND RESULTS
Results may vary with market conditions. Realistic KPIs are set at the start of the project.
""",
            description="Full digital marketing services",
            channels="Relevant digital platforms",
            objectives="According to agreed KPIs",
            deliverables="Deliverables according to the agreed strategy",
            term_sentence="The services will be carried out",
            price_subject="of the services",
        ),
        _template(
            "design",
            "DESIGN SERVICES CONTRACT",
            "DESIGNER",
            """
FIRST. PURPOSE
THE DESIGNER undertakes to create and deliver design services:
- Design project: {title}
- Description: {description}
- Style: {style}
- Delivery formats: {formats}
""",
            """
- Initial design proposals
- Final files in the required formats
- Usage and application guide
- {deliverables}
""",
            """
FIFTH. REVISIONS
Up to 3 rounds of revisions are included. Changes outside the original scope are billed separately.

SIXTH. USAGE RIGHTS
Commercial usage rights are transferred to THE CLIENT. THE DESIGNER keeps the right to show the work in a portfolio.
""",
            description="Professional graphic design services",
            style="According to the client brief",
            formats="Standard digital formats",
            deliverables="Variations as specified",
            term_sentence="The design will be developed",
            price_subject="of the design",
        ),
        _template(
            "content",
            "CONTENT CREATION SERVICES CONTRACT",
            "CREATOR",
            """
FIRST. PURPOSE
THE CREATOR undertakes to produce professional content:
- Content type: {title}
- Description: {description}
- Format: {format}
- Volume: {volume}
""",
            """
- Original, plagiarism-free content
- Content optimised for the agreed objectives
- Revisions and corrections included
- {deliverables}
""",
            """
FIFTH. ORIGINALITY
All content is original. THE CREATOR warrants that it does not infringe third-party copyright.

SIXTH. REVISIONS
Up to 2 minor revisions are included. Substantial changes are billed separately.
""",
            description="Original content creation",
            format="As specified",
            volume="As agreed",
            deliverables="Deliverables as specified",
            term_sentence="The content will be created",
            price_subject="for the content",
        ),
        _template(
            GENERAL,
            "PROFESSIONAL SERVICES CONTRACT",
            "PROVIDER",
            """
FIRST. PURPOSE
THE PROVIDER undertakes to provide professional services:
- Service: {title}
- Description: {description}
- Scope: {scope}
- Methodology: {methodology}
""",
            """
- Services carried out as specified
- Corresponding documentation and reports
- Support during execution
- {deliverables}
""",
            """
FIFTH. QUALITY
THE PROVIDER carries out the services to the highest professional standards.

SIXTH. CONFIDENTIALITY
All information exchanged is treated as confidential by both parties.
""",
            description="Specialised professional services",
            scope="As agreed",
            methodology="Professional methodology",
            deliverables="Deliverables within the agreed scope",
            term_sentence="The services will be provided",
            price_subject="of the services",
        ),
    )
}

# Checked in order; the first category with a matching keyword wins
CATEGORY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("development", ("development", "desarrollo", "programming", "programacion", "software", "web", "app")),
    ("consulting", ("consulting", "consultoria", "advisory", "asesoria", "consultant", "consultor", "strategy", "estrategia")),
    ("marketing", ("marketing", "advertising", "publicidad", "seo", "social", "campaign", "campana")),
    ("design", ("design", "diseno", "graphic", "grafico", "logo", "branding")),
    ("content", ("content", "contenido", "copywriting", "redaccion", "blog", "article", "articulo")),
)


class _BracketedMissing(dict):
    def __missing__(self, key: str) -> str:
        return f"[{key.replace('_', ' ').capitalize()}]"


class ContentTemplateProvider:
    """Looks up and fills contract boilerplate; unknown categories fall back to general."""

    def __init__(self, templates: Optional[Mapping[str, ContractTemplate]] = None):
        self.templates: Dict[str, ContractTemplate] = dict(templates or DEFAULT_TEMPLATES)
        if GENERAL not in self.templates:
            self.templates[GENERAL] = DEFAULT_TEMPLATES[GENERAL]

    @property
    def categories(self) -> Tuple[str, ...]:
        return tuple(self.templates)

    def template_for(self, tag: Optional[str]) -> ContractTemplate:
        key = (tag or "").strip().lower()
        template = self.templates.get(key)
        if template is None:
            logger.debug("No contract template for %r, using %s", tag, GENERAL)
            return self.templates[GENERAL]
        return template

    def lookup(self, tag: Optional[str]) -> str:
        """Raw boilerplate for a category, with its {placeholders} unfilled."""
        return self.template_for(tag).text

    def render(self, tag: Optional[str], context: Optional[Mapping[str, Any]] = None) -> str:
        """
        Fill the boilerplate for tag.

        Values from context win over the template's defaults. Placeholders with
        neither become bracketed labels such as ``[Client tax id]``.
        """
        template = self.template_for(tag)
        values = _BracketedMissing(template.defaults)
        for key, value in (context or {}).items():
            if value is not None and str(value).strip():
                values[key] = str(value)
        return template.text.format_map(values)


def detect_service_category(title: Optional[str], description: Optional[str] = None) -> str:
    """Guess a category from free text; English and Spanish keywords, accents ignored."""
    text = _fold(f"{title or ''} {description or ''}")
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return GENERAL


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def contract_context(model: DocumentModel, **extra: Any) -> Dict[str, Any]:
    """Template values taken from a document model; extra keys override them."""
    formatter = MoneyFormatter(model.locale or "es_ES")
    context: Dict[str, Any] = {
        "provider_name": model.issuer.display_name,
        "provider_tax_id": model.issuer.tax_id or "[Provider tax ID]",
        "provider_address": model.issuer.address or "[Provider address]",
        "client_name": model.counterparty.display_name,
        "client_tax_id": model.counterparty.tax_id or "[Client tax ID]",
        "client_address": model.counterparty.address or "[Client address]",
        "title": model.title_line,
        "description": model.description_line,
        "contract_value": formatter.format_number(model.totals.display().total),
        "currency": (model.currency or "EUR").upper(),
        "payment_terms": model.terms_and_conditions,
    }
    if model.header.issue_date:
        context["start_date"] = format_date(model.header.issue_date)
    if model.header.due_date:
        context["end_date"] = format_date(model.header.due_date)
    context.update(extra)
    return context


def with_contract_body(
    model: DocumentModel,
    category: Optional[str] = None,
    provider: Optional[ContentTemplateProvider] = None,
    **extra: Any,
) -> DocumentModel:
    """Return a copy of model whose contract_body is the filled boilerplate."""
    provider = provider or ContentTemplateProvider()
    category = category or detect_service_category(model.title_line, model.description_line)
    body = provider.render(category, contract_context(model, **extra))
    logger.debug("Contract body rendered from %s template", provider.template_for(category).category)
    return replace(model, contract_body=body)
