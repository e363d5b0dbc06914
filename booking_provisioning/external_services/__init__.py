# booking_provisioning/external_services/__init__.py
"""REST clients for the payment processor, voice platform and email sender."""
