import base64

import pytest

from utopia import FileAccessError
from utopia.errors import FileMissingError, FilenameRequiredError, PathIsDirectoryError
from utopia.files import encode_file, resolve_upload


def test_encode_file(tmp_path):
    path = tmp_path / 'picture.png'
    path.write_bytes(b'\x89PNG\r\n')
    assert base64.b64decode(encode_file(path)) == b'\x89PNG\r\n'
    assert base64.b64decode(encode_file(str(path))) == b'\x89PNG\r\n'


def test_encode_file_errors(tmp_path):
    with pytest.raises(FilenameRequiredError):
        encode_file('')

    with pytest.raises(FileMissingError):
        encode_file(tmp_path / 'missing.png')

    with pytest.raises(PathIsDirectoryError):
        encode_file(tmp_path)

    # All three are file access errors.
    with pytest.raises(FileAccessError):
        encode_file(tmp_path)


def test_resolve_upload(tmp_path):
    path = tmp_path / 'notes.txt'
    path.write_text('hello')

    assert resolve_upload(path, None) == ('notes.txt', base64.b64encode(b'hello').decode())
    assert resolve_upload('/elsewhere/given.txt', 'ZGF0YQ==') == ('given.txt', 'ZGF0YQ==')

    with pytest.raises(FilenameRequiredError):
        resolve_upload(None, 'ZGF0YQ==')


def test_upload_file(client, recorder, tmp_path):
    path = tmp_path / 'report.pdf'
    path.write_bytes(b'%PDF-1.4')

    echoed = client.upload_file(str(path))
    assert echoed['method'] == 'uploadFile'
    assert echoed['params'] == {
        'fileDataBase64': base64.b64encode(b'%PDF-1.4').decode(),
        'fileName': 'report.pdf',
    }


def test_send_channel_picture(client, recorder, tmp_path):
    path = tmp_path / 'cat.jpg'
    path.write_bytes(b'\xff\xd8\xff')

    echoed = client.send_channel_picture('CHANNEL01', str(path))
    assert echoed['method'] == 'sendChannelPicture'
    assert echoed['params'] == {
        'channelid': 'CHANNEL01',
        'base64_image': base64.b64encode(b'\xff\xd8\xff').decode(),
        'filename_image': 'cat.jpg',
    }


def test_upload_errors_send_nothing(client, recorder, tmp_path):
    with pytest.raises(FileMissingError):
        client.upload_file(str(tmp_path / 'missing.bin'))

    with pytest.raises(PathIsDirectoryError):
        client.send_channel_picture('CHANNEL01', str(tmp_path))

    with pytest.raises(FilenameRequiredError):
        client.upload_file('')

    assert recorder.envelopes == []
