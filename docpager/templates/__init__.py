"""Contract boilerplate kept outside the layout engine."""

from .contract_templates import (
    ContentTemplateProvider,
    ContractTemplate,
    contract_context,
    detect_service_category,
    with_contract_body,
)

__all__ = [
    "ContentTemplateProvider",
    "ContractTemplate",
    "contract_context",
    "detect_service_category",
    "with_contract_body",
]
