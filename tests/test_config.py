"""Tests for configuration loading."""

from datetime import datetime, time, timedelta, timezone
from unittest.mock import patch

from fitcal.config import Config, load_config, local_now, operating_window, parse_clock


def write_conf(tmp_path, text: str):
    path = tmp_path / "fitcal.conf"
    path.write_text(text)
    return path


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.conf")
        assert config == Config()

    def test_defaults(self):
        config = Config()
        assert config.open_time == "10:00"
        assert config.close_time == "20:00"
        assert config.durations == [60, 90, 120]
        assert config.tick_seconds == 60
        assert config.require_delivery_confirmation is False

    def test_parses_values(self, tmp_path):
        path = write_conf(
            tmp_path,
            "# fitcal settings\n"
            "DATA_DIR=~/gym/data\n"
            "OPEN_TIME=09:00\n"
            "CLOSE_TIME = 21:30\n"
            "DURATIONS=45, 60,90\n"
            "DEFAULT_LEAD_MINUTES=30\n"
            "TICK_SECONDS=30\n"
            "REQUIRE_DELIVERY_CONFIRMATION=yes\n"
            "TELEGRAM_ALLOWED_USERS=111, 222\n",
        )
        config = load_config(path)
        assert config.data_dir == "~/gym/data"
        assert config.open_time == "09:00"
        assert config.close_time == "21:30"
        assert config.durations == [45, 60, 90]
        assert config.default_lead_minutes == 30
        assert config.tick_seconds == 30
        assert config.require_delivery_confirmation is True
        assert config.telegram_allowed_users == [111, 222]

    def test_quoted_values_and_inline_comments(self, tmp_path):
        path = write_conf(
            tmp_path,
            'TELEGRAM_BOT_TOKEN="123:abc#def" # from BotFather\n'
            "TIMEZONE=Europe/Berlin # local clock\n",
        )
        config = load_config(path)
        assert config.telegram_bot_token == "123:abc#def"
        assert config.timezone == "Europe/Berlin"

    def test_invalid_numbers_keep_defaults(self, tmp_path, caplog):
        path = write_conf(tmp_path, "TICK_SECONDS=often\nDURATIONS=one,two\n")
        config = load_config(path)
        assert config.tick_seconds == 60
        assert config.durations == [60, 90, 120]
        assert "TICK_SECONDS" in caplog.text

    def test_ignores_junk_lines(self, tmp_path):
        path = write_conf(tmp_path, "not a setting\n\nUNKNOWN_KEY=1\nSLOT_MINUTES=15\n")
        assert load_config(path).slot_minutes == 15

    def test_default_path(self, tmp_path):
        path = write_conf(tmp_path, "CLOSE_TIME=19:00\n")
        with patch("fitcal.config.CONFIG_FILE", path):
            assert load_config().close_time == "19:00"


class TestOperatingWindow:
    def test_parse_clock(self):
        assert parse_clock("07:45") == time(7, 45)

    def test_window_from_config(self):
        window = operating_window(Config(open_time="09:00", close_time="18:00", slot_minutes=15, durations=[90, 60]))
        assert window.open_time == time(9, 0)
        assert window.close_time == time(18, 0)
        assert window.slot_minutes == 15
        assert window.durations == (60, 90)

    def test_malformed_hours_fall_back_to_defaults(self, caplog):
        window = operating_window(Config(open_time="ten", close_time="18:00", durations=[60]))
        assert window.open_time == time(10, 0)
        assert window.close_time == time(20, 0)
        assert window.durations == (60,)
        assert "Invalid operating window" in caplog.text

    def test_closing_before_opening_falls_back(self):
        window = operating_window(Config(open_time="20:00", close_time="08:00"))
        assert window.open_time < window.close_time


class TestTimezone:
    def test_unknown_zone_ignored(self, tmp_path, caplog):
        config = load_config(write_conf(tmp_path, "TIMEZONE=Mars/Olympus_Mons\n"))
        assert config.timezone == ""
        assert "Unknown TIMEZONE" in caplog.text

    def test_known_zone_kept(self, tmp_path):
        config = load_config(write_conf(tmp_path, "TIMEZONE=Europe/Moscow\n"))
        assert config.timezone == "Europe/Moscow"

    def test_local_now_is_naive_in_configured_zone(self):
        now = local_now(Config(timezone="UTC"))
        expected = datetime.now(timezone.utc).replace(tzinfo=None)
        assert now.tzinfo is None
        assert abs(now - expected) < timedelta(seconds=5)

    def test_local_now_defaults_to_system_clock(self):
        now = local_now(Config())
        assert now.tzinfo is None
        assert abs(now - datetime.now()) < timedelta(seconds=5)
