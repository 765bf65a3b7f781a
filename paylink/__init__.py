"""Payment collection orchestrator

This service drives a payee-initiated collection through an open-banking
provider:
- Accepts a payment-request submission and emails the payer a
  verification link
- Resolves the verification report and extracts the payer's IBAN
- Creates a payment request and emails the payer a payment link
- Reports payment status when the payer returns from the provider
"""

__version__ = "1.0.0"
