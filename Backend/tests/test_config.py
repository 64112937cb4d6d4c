import importlib
import os

import config


def test_dotenv_file_fills_missing_settings(tmp_path, monkeypatch):
    env_file = tmp_path / '.env'
    env_file.write_text('LEADERBOARD_SIZE=7\nSESSION_SECRET=from-file\n')
    monkeypatch.chdir(tmp_path)
    # Registers LEADERBOARD_SIZE for removal once the test ends
    monkeypatch.setenv('LEADERBOARD_SIZE', '0')
    monkeypatch.delenv('LEADERBOARD_SIZE')

    try:
        reloaded = importlib.reload(config)
        assert reloaded.settings.LEADERBOARD_SIZE == 7
        # The process environment wins over the file
        assert reloaded.settings.SESSION_SECRET == 'test-secret'
    finally:
        env_file.unlink()
        os.environ.pop('LEADERBOARD_SIZE', None)
        importlib.reload(config)
