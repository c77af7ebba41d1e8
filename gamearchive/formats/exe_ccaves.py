'''
# Crystal Caves executable, episode 1

The levels of the game are stored inside cc1.exe, at fixed offsets: the
executable is handled as a fixed-layout archive, the rest of it ends up in
the dataN.bin fillers.

The executable must be already decompressed (e.g. with UNLZEXE).
'''
from .. import fixed
from ..fixed import FixedSpec
from ..enum import Confidence
from ..exceptions import FormatError
from ..handler import ArchiveHandler, Identification
from ..metadata import Metadata
from ..supp import replace_filename


EXE_LENGTH = 191984
SIGNATURE_OFFSET = 0x2A131
# there are no version strings, this is a message unlikely to be changed
SIGNATURE = b'EGA/VGA card'

# each level row is 41 bytes long
ROW_LEN = 41

FILE_LIST = (
    FixedSpec(name='e1int.ccl', offset=0x8CE0, disk_size=ROW_LEN * 5),
    FixedSpec(name='e1fin.ccl', disk_size=ROW_LEN * 6),
    FixedSpec(name='e1map.ccl', disk_size=ROW_LEN * 25),
    FixedSpec(name='e1l01.ccl', disk_size=ROW_LEN * 24),
    FixedSpec(name='e1l02.ccl', disk_size=ROW_LEN * 24),
    FixedSpec(name='e1l03.ccl', disk_size=ROW_LEN * 24),
    FixedSpec(name='e1l04.ccl', disk_size=ROW_LEN * 24),
    FixedSpec(name='e1l05.ccl', disk_size=ROW_LEN * 24),
    FixedSpec(name='e1l06.ccl', disk_size=ROW_LEN * 24),
    FixedSpec(name='e1l07.ccl', disk_size=ROW_LEN * 23),
    FixedSpec(name='e1l08.ccl', disk_size=ROW_LEN * 23),
    FixedSpec(name='e1l09.ccl', disk_size=ROW_LEN * 24),
    FixedSpec(name='e1l10.ccl', disk_size=ROW_LEN * 24),
    FixedSpec(name='e1l11.ccl', disk_size=ROW_LEN * 24),
    FixedSpec(name='e1l12.ccl', disk_size=ROW_LEN * 24),
    FixedSpec(name='e1l13.ccl', disk_size=ROW_LEN * 24),
    FixedSpec(name='e1l14.ccl', disk_size=ROW_LEN * 23),
    FixedSpec(name='e1l15.ccl', disk_size=ROW_LEN * 24),
    FixedSpec(name='e1l16.ccl', disk_size=ROW_LEN * 24),
)


class EXECCaves1Handler(ArchiveHandler):

    def metadata(self):
        return Metadata(
            id='arc-exe-ccaves1',
            title='Crystal Caves .exe (episode 1)',
            games=('Crystal Caves (episode 1)',),
            glob=('cc1.exe',),
        )

    def supps(self, filename, content=None):
        return {
            'main': replace_filename(filename, 'cc1.exe'),
        }

    def identify(self, content, filename=None):
        if len(content) != EXE_LENGTH:
            return Identification.rejected('Unexpected file length.')

        if bytes(content[SIGNATURE_OFFSET:SIGNATURE_OFFSET + len(SIGNATURE)]) != SIGNATURE:
            return Identification.rejected('Wrong signature.')

        return Identification.definite('Signature matched.')

    def check_limits(self, archive):
        return super().check_limits(archive) + fixed.check_limits(archive, FILE_LIST)

    def parse(self, content):
        main = self._get_main(content)

        identification = self.identify(main)
        if identification.valid is not Confidence.DEFINITE:
            raise FormatError(f'not the episode 1 executable of Crystal Caves: {identification.reason}')

        return fixed.parse(main, FILE_LIST)

    def generate(self, archive):
        return {
            'main': fixed.generate(archive, FILE_LIST),
        }
