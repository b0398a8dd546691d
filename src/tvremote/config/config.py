import logging
import os
import platform

from configobj import ConfigObj, Section, ConfigObjError, flatten_errors
from configobj.validate import Validator

logger = logging.getLogger(__name__)

# The default extension for configuration files
config_extension = '.cfg'

# the root directory of the tvremote package, where the packaged configuration files live
package_root = os.path.abspath(os.path.join(os.path.dirname(os.path.abspath(__file__)), '..'))


def config_flavor(name, flavor=None):
    configname = name if not flavor else name + '.' + flavor
    return configname


def config_filename(name, directory=None):
    """
    Determines the location of a config file. Files are resolved relative to the
    package root unless a directory is given.
    """
    dirname = directory if directory else package_root
    return os.path.join(dirname, name + config_extension)


def user_config_filename(name):
    return os.path.expanduser('~/' + name + config_extension)


def load_config_file_base(file, must_exist=True):
    """
    Loads a configuration file
    :param file:        The configuration file to load
    :param must_exist:  when True, the file must exist or an exception is thrown.
    :return: The ConfigObj instance for the file.
    """
    if must_exist or os.path.exists(file):
        return ConfigObj(file, interpolation='Template', file_error=must_exist)
    return ConfigObj()


def config_flavor_file(name, directory=None, subpart=None, must_exist=False) -> ConfigObj:
    """
    Loads a specialization of a config file. The configuration file is expected to be named
    after the base, followed by a period and then the specialization, if the specialization is given,
    otherwise just the base name.
    :param name:    The name of the base configuration
    :param subpart: The name of the specialization.
    :return: The ConfigObj for the configuration file.
    """
    configname = config_flavor(name, subpart)
    file = config_filename(configname, directory)
    return load_config_file_base(file, must_exist)


def load_config(name, directory=None):
    """
        Loads all the configuration files that relate to the given name.
        Configurations are merged in this order, later files overriding earlier ones:
        - the default specialization
        - the platform specialization
        - the user override in the home directory
        - the base configuration
        The merged configuration is then validated against the schema specialization,
        which also converts values to their declared types and fills in defaults.
    :param name: the base name of the configuration to load.
    :param directory: the directory holding the configuration files. Defaults to the package root.
    :return: the validated ConfigObj
    """
    local_config = config_flavor_file(name, directory)
    default_config = config_flavor_file(name, directory, 'default')
    platform_config = config_flavor_file(name, directory, platform.system().lower())
    user_config = load_config_file_base(user_config_filename(name), must_exist=False)
    schema_file = config_filename(config_flavor(name, 'schema'), directory)
    config = ConfigObj(configspec=schema_file)
    config.merge(default_config)
    config.merge(platform_config)
    config.merge(user_config)
    config.merge(local_config)

    validator = Validator()
    result = config.validate(validator, preserve_errors=True)
    if result is not True:
        for section_list, key, res in flatten_errors(config, result):
            if key is not None:
                logger.error('The "%s" key in the section "%s" failed validation: %s' %
                             (key, ', '.join(section_list), res))
            else:
                logger.error('The following section was missing: %s' % ', '.join(section_list))
        raise ConfigObjError("the config '%s' failed validation" % name)
    return config


def fetch_conf_path(conf: Section, path):
    """
    Retrieves the named configuration section
    :param conf:        The root configuration
    :param path:        An iterable that lists the names of the sections to resolve
    :return: The configuration section identified by the path, or None
    """
    for p in path:
        conf = conf.get(p, None)
        if conf is None:
            return None
    return conf


def apply_conf(conf: Section, target):
    """
    Applies the attributes contained in a configuration object to a target object.
    It does this by iterating over the items in the configuration and setting any attributes with the same name.
    Sub-sections are skipped.
    """
    for k, v in conf.items():
        if isinstance(v, Section):
            continue
        if hasattr(target, k):
            setattr(target, k, v)


def apply(target, config_name, config_path=None, directory=None):
    """
    Applies defined values from a configuration to a given target object.
    :param target: The object to receive the values defined
    :param config_name: The configuration file to load.
    :param config_path: The dotted path of the section holding the values. The root section when not given.
    :param directory: the directory containing the configuration files
    :return: the loaded configuration
    """
    conf = load_config(config_name, directory)
    section = fetch_conf_path(conf, config_path.split('.')) if config_path else conf
    if section:
        apply_conf(section, target)
    return conf


def configure_module(module, config_name=None, directory=None):
    """
    Applies the layered configuration named after the module (the last part of its name, unless
    config_name is given) to the module's global values.
    """
    if not config_name:
        config_name = module.__name__.split('.')[-1]
    return apply(module, config_name, directory=directory)
