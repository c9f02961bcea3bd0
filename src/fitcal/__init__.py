"""fitcal - personal trainer booking assistant."""
