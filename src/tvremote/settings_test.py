import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from hamcrest import assert_that, is_

from tvremote import settings
from tvremote.config import config


class SettingsTest(unittest.TestCase):

    def setUp(self):
        self.saved = {k: getattr(settings, k) for k in ('bridge_port', 'probe_timeout', 'scan_concurrency',
                                                        'bridge_executable', 'key_settle_delay')}
        self.home = tempfile.mkdtemp()
        patcher = patch.object(config, 'user_config_filename',
                               side_effect=lambda name: os.path.join(self.home, name + '.cfg'))
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        for k, v in self.saved.items():
            setattr(settings, k, v)
        shutil.rmtree(self.home)

    def test_defaults(self):
        assert_that(settings.bridge_port, is_(5555))
        assert_that(settings.probe_timeout, is_(0.5))
        assert_that(settings.scan_concurrency, is_(50))
        assert_that(settings.connect_timeout, is_(5.0))
        assert_that(settings.command_timeout, is_(2.0))
        assert_that(settings.key_settle_delay, is_(0.05))
        assert_that(settings.spp_uuid, is_('00001101-0000-1000-8000-00805F9B34FB'))

    def test_configure_applies_packaged_defaults(self):
        with patch.object(config.platform, 'system', return_value='Linux'):
            settings.configure()
        assert_that(settings.bridge_port, is_(5555))
        assert_that(settings.probe_timeout, is_(0.5))
        assert_that(settings.bridge_executable, is_('adb'))

    def test_configure_applies_user_override(self):
        with open(os.path.join(self.home, 'tvremote.cfg'), 'w') as f:
            f.write("scan_concurrency = 10\nkey_settle_delay = 0.1\n")
        with patch.object(config.platform, 'system', return_value='Linux'):
            settings.configure()
        assert_that(settings.scan_concurrency, is_(10))
        assert_that(settings.key_settle_delay, is_(0.1))

    def test_configure_applies_platform_file(self):
        with patch.object(config.platform, 'system', return_value='Windows'):
            settings.configure()
        assert_that(settings.bridge_executable, is_('adb.exe'))
