'''
The bundled format handlers.

ALL lists them in the order autodetection tries them: first the formats with a
signature at a fixed offset, last the ones that can only be guessed.
'''
from ..registry import Registry
from .grp_build import GRPBuildHandler
from .wad_doom import WADDoomHandler
from .rff_blood import RFFBloodV200Handler
from .gxl_genus import GXLGenusHandler
from .exe_ccaves import EXECCaves1Handler
from .bnk_carnage import BNKCarnageHandler
from .dat_lostvikings import DATLostVikingsHandler
from .dat_hocus import DATHocusHandler


ALL = (
    GRPBuildHandler,
    WADDoomHandler,
    RFFBloodV200Handler,
    GXLGenusHandler,
    EXECCaves1Handler,
    BNKCarnageHandler,
    DATLostVikingsHandler,
    DATHocusHandler,
)


def default_registry(codecs=None, logger=None) -> Registry:
    '''Build a registry with all the bundled handlers.

    codecs maps the id of a handler to the codec it needs, the handlers
    without one can only copy their compressed files as they are.'''
    codecs = codecs or {}
    handlers = []
    for cls in ALL:
        handler = cls()
        codec = codecs.get(handler.id)
        if codec is not None:
            handler = cls(codec=codec)
        handlers.append(handler)

    return Registry(handlers, logger=logger)
