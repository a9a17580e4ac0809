import os
import tempfile
import unittest

from configobj import ConfigObjError
from hamcrest import assert_that, is_, equal_to, calling, raises, none, instance_of

from spotify_info.codecs import JsonCodec
from spotify_info.config.config import ListenerSettings, layer_file, load_config, load_settings, platform_name, \
    read_file, user_config_file

test_directory = os.path.dirname(__file__)

# keeps a real ~/spotify_info.cfg out of the tests
no_user_file = os.path.join(test_directory, 'no_such_user.cfg')


class ConfigTestCase(unittest.TestCase):

    def test_config_file_not_found(self):
        assert_that(calling(read_file).with_args('blah'), raises(IOError))

    def test_missing_optional_file_is_empty(self):
        assert_that(read_file('blah', must_exist=False), is_(equal_to({})))

    def test_config_file_invalid_syntax(self):
        assert_that(calling(read_file).with_args(os.path.join(test_directory, 'config_test_invalid_syntax.cfg')),
                    raises(ConfigObjError, "at .*config_test_invalid_syntax.cfg"))

    def test_config_file_invalid_schema(self):
        assert_that(calling(load_config).with_args('config_test_invalid', test_directory, no_user_file),
                    raises(ConfigObjError, "the config file config_test_invalid failed validation"))

    def test_layer_file(self):
        assert_that(layer_file('dir', 'name'), is_(os.path.join('dir', 'name.cfg')))
        assert_that(layer_file('dir', 'name', 'default'), is_(os.path.join('dir', 'name.default.cfg')))
        assert_that(os.path.exists(layer_file(test_directory, 'config_test', 'default')), is_(True))

    def test_user_config_file_is_in_home(self):
        assert_that(user_config_file('name'), is_(os.path.join(os.path.expanduser('~'), 'name.cfg')))

    def test_platform_name(self):
        assert_that(platform_name('Windows'), is_('windows'))
        assert_that(platform_name('Darwin'), is_('osx'))
        assert_that(platform_name('Linux'), is_('linux'))

    def test_layers_are_merged_and_validated(self):
        listener = load_config('config_test', test_directory, no_user_file)['listener']
        assert_that(listener['port'], is_(20000))
        assert_that(listener['codec'], is_('json'))
        assert_that(listener['progress_interval'], is_(1000))
        assert_that(listener['poll_interval'], is_(0.25))
        assert_that(listener['host'], is_('127.0.0.1'))

    def test_user_file_overrides_defaults(self):
        with tempfile.TemporaryDirectory() as directory:
            user_file = os.path.join(directory, 'user.cfg')
            with open(user_file, 'w') as f:
                f.write("[listener]\nport = 30000\n")
            listener = load_config('config_test', test_directory, user_file)['listener']
        assert_that(listener['port'], is_(30000))
        assert_that(listener['codec'], is_('json'))


class ListenerSettingsTest(unittest.TestCase):

    def test_packaged_defaults(self):
        settings = load_settings(user_file=no_user_file)
        assert_that(settings, is_(equal_to(ListenerSettings())))
        assert_that(settings.address, is_(('127.0.0.1', 19532)))
        assert_that(settings.progress_interval, is_(none()))

    def test_settings_from_directory(self):
        settings = load_settings('config_test', test_directory, no_user_file)
        assert_that(settings, is_(equal_to(ListenerSettings(port=20000, codec='json', progress_interval=1000,
                                                            poll_interval=0.25))))

    def test_from_section_ignores_unknown_keys(self):
        settings = ListenerSettings.from_section({'port': 1234, 'volume': 11})
        assert_that(settings, is_(equal_to(ListenerSettings(port=1234))))

    def test_bind_uses_the_settings(self):
        settings = ListenerSettings(port=0, codec='json', poll_interval=0.1, handshake_timeout=1.0)
        with settings.bind() as listener:
            assert_that(listener.address[0], is_('127.0.0.1'))
            assert_that(listener.codec, is_(instance_of(JsonCodec)))
            assert_that(listener.poll_interval, is_(0.1))
            assert_that(listener.handshake_timeout, is_(1.0))

    def test_bind_with_unknown_codec(self):
        assert_that(calling(ListenerSettings(port=0, codec='xml').bind), raises(KeyError))
