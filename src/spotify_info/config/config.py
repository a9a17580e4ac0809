"""
Layered configuration for the listener, read with configobj and checked against a schema.

For a configuration named `spotify_info` the layers, lowest priority first, are:

- spotify_info.default.cfg   the packaged defaults
- spotify_info.<os>.cfg      platform overrides, where <os> is linux, windows or osx
- ~/spotify_info.cfg         the user's overrides
- spotify_info.cfg           local overrides, beside the defaults

Only the defaults need to exist. The merged result is validated against spotify_info.schema.cfg,
which also converts the values to their types and fills in missing keys.
"""
import logging
import os
import platform

from configobj import ConfigObj, ConfigObjError, flatten_errors
from validate import Validator

from spotify_info.codecs import codec_for
from spotify_info.listener import Listener
from spotify_info.support.mixins import CommonEqualityMixin, StringerMixin

logger = logging.getLogger(__name__)

config_extension = '.cfg'

# the directory holding the packaged configuration
package_directory = os.path.dirname(__file__)


def layer_file(directory, name, layer=None):
    """ the path of one layer, `<name>.<layer>.cfg`, or `<name>.cfg` for the local layer. """
    return os.path.join(directory, (name + '.' + layer if layer else name) + config_extension)


def user_config_file(name):
    return os.path.join(os.path.expanduser('~'), name + config_extension)


def platform_name(system=None):
    """
    >>> platform_name('Darwin')
    'osx'
    >>> platform_name('Windows')
    'windows'
    """
    system = (system or platform.system()).lower()
    return 'osx' if system == 'darwin' else system


def read_file(path, must_exist=True) -> ConfigObj:
    """
    Reads one configuration file.
    :param must_exist: when False, a missing file reads as empty.
    :raises IOError: the file must exist and does not
    :raises ConfigObjError: the file is malformed. The message names the file.
    """
    if not must_exist and not os.path.exists(path):
        return ConfigObj()
    try:
        return ConfigObj(path, file_error=True)
    except ConfigObjError as e:
        raise type(e)("%s at %s" % (e, path)) from e


def load_config(name, directory, user_file=None) -> ConfigObj:
    """
    Merges the layers of the named configuration and validates the result.
    :param directory: where the packaged and local layers live
    :param user_file: the user's overrides. Defaults to ~/<name>.cfg
    :raises ConfigObjError: a layer is malformed, or the merged values fail the schema
    """
    layers = [
        layer_file(directory, name, 'default'),
        layer_file(directory, name, platform_name()),
        user_file or user_config_file(name),
        layer_file(directory, name),
    ]
    schema = layer_file(directory, name, 'schema')
    config = ConfigObj(configspec=schema) if os.path.exists(schema) else ConfigObj()
    for path in layers:
        config.merge(read_file(path, must_exist=False))
    if config.configspec is not None:
        _validate(config, name)
    return config


def _validate(config: ConfigObj, name):
    result = config.validate(Validator(), preserve_errors=True)
    if result is not True:
        problems = ["%s: %s" % ('.'.join(sections + [key or '']), error or 'missing')
                    for sections, key, error in flatten_errors(config, result)]
        raise ConfigObjError("the config file %s failed validation %s" % (name, ', '.join(problems)))


class ListenerSettings(CommonEqualityMixin, StringerMixin):
    """
    The host-visible configuration: the bind address, the wire grammar and the
    progress update interval requested from the player.
    """
    keys = ('host', 'port', 'codec', 'progress_interval', 'poll_interval', 'handshake_timeout')

    def __init__(self, host='127.0.0.1', port=19532, codec='delimited', progress_interval=None,
                 poll_interval=0.5, handshake_timeout=5.0):
        self.host = host
        self.port = port
        self.codec = codec
        self.progress_interval = progress_interval
        self.poll_interval = poll_interval
        self.handshake_timeout = handshake_timeout

    @classmethod
    def from_section(cls, section) -> 'ListenerSettings':
        """ reads the settings from a [listener] section. Unknown keys are ignored. """
        return cls(**{key: value for key, value in section.items() if key in cls.keys})

    @property
    def address(self):
        return self.host, self.port

    def bind(self, **kwargs) -> Listener:
        """
        Binds a listener with these settings.
        :raises TransportError: the address could not be bound
        :raises KeyError: the codec is not known
        """
        return Listener.bind(self.address, codec=codec_for(self.codec), poll_interval=self.poll_interval,
                             handshake_timeout=self.handshake_timeout, **kwargs)


def load_settings(name='spotify_info', directory=None, user_file=None) -> ListenerSettings:
    """
    Loads the listener settings from the [listener] section of the configuration.
    :param directory: the directory with the configuration files. Defaults to the packaged configuration.
    """
    config = load_config(name, directory or package_directory, user_file)
    settings = ListenerSettings.from_section(config.get('listener', {}))
    logger.debug("loaded settings %s" % settings)
    return settings
