"""Chat Attribution Server - order webhooks and conversion reporting over Postgres."""
