__app_name__ = "gw2-addon-debug"
__version__ = "0.3.0"
