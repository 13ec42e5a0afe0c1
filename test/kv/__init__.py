'''
Tests for `consulkv`, with colored logging configured for the whole package.
'''
import logging, sys
from rainbow_logging_handler import RainbowLoggingHandler

handler = RainbowLoggingHandler(sys.stderr)
handler.setFormatter(logging.Formatter('%(asctime)s\t[%(name)s] %(pathname)s:%(lineno)d\t%(levelname)s:\t%(message)s'))

logger = logging.getLogger()
logger.setLevel(logging.DEBUG)
logger.addHandler(handler)

logging.getLogger('tornado.access').setLevel(logging.ERROR)
