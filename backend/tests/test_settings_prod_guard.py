from __future__ import annotations

import pytest

from rentdesk.config import Settings


def test_prod_refuses_dev_auth_and_default_secret():
    with pytest.raises(ValueError):
        Settings(app_env="prod", auth_mode="dev", jwt_secret="s3cret", cors_allow_origins=["https://app.example"])

    with pytest.raises(ValueError):
        Settings(app_env="prod", auth_mode="jwt", cors_allow_origins=["https://app.example"])

    with pytest.raises(ValueError):
        Settings(app_env="prod", auth_mode="jwt", jwt_secret="s3cret", cors_allow_origins="*")


def test_prod_settings_accepted_when_locked_down():
    s = Settings(
        app_env="prod",
        auth_mode="jwt",
        jwt_secret="s3cret",
        cors_allow_origins=["https://app.example"],
        platform_fee_rate=0.04,
    )
    assert s.platform_fee_rate == 0.04
    assert s.lease_term_years == 1
