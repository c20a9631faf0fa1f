"""Tests for uploading request files when a model is saved."""
import pytest
from asgiref.sync import async_to_sync

from imageup.exceptions import ValidationFailed
from imageup.middleware import get_current_request, use_request
from tests.testapp.models import ModelPathUser, User

pytestmark = pytest.mark.django_db

USER_DATA = {'name': 'Saqueib', 'email': 'me@example.com', 'password': 'secret'}


def test_auto_uploads_images_from_request(client, make_image, public_disk):
    response = client.post('/test/users', {
        **USER_DATA,
        'avatar': make_image('avatar.jpg'),
        'cover': make_image('cover.jpg'),
    })

    assert response.status_code == 201
    data = response.json()
    assert data['avatar'].startswith('uploads/')
    assert data['cover'].startswith('uploads/')
    assert public_disk.exists(data['avatar'])
    assert public_disk.exists(data['cover'])

    user = User.objects.get(pk=data['id'])
    assert user.get_original('avatar') == data['avatar']
    assert user.get_original('cover') == data['cover']


def test_auto_uploads_images_without_options(client, make_image, public_disk):
    response = client.post('/test/users/uploads/images-without-options', {
        **USER_DATA,
        'avatar': make_image('avatar.jpg'),
        'cover': make_image('cover.jpg'),
    })

    data = response.json()
    assert public_disk.exists(data['avatar'])
    assert public_disk.exists(data['cover'])


def test_auto_upload_skips_fields_with_auto_upload_disabled(client, make_image, public_disk):
    response = client.post('/test/users/uploads/images-with-mixed-options', {
        **USER_DATA,
        'avatar': make_image('avatar.jpg'),
        'cover': make_image('cover.jpg'),
    })

    data = response.json()
    assert public_disk.exists(data['avatar'])
    assert data['cover'] is None
    assert len(public_disk.listdir('uploads')[1]) == 1


def test_auto_uploads_files_using_file_input(client, make_file, public_disk):
    response = client.post('/test/users/uploads/files-with-options', {
        **USER_DATA,
        'resume': make_file('resume.pdf'),
        'letter': make_file('letter.pdf', b'Dear hiring manager'),
    })

    data = response.json()
    assert data['resume'].startswith('resumes/')
    assert data['cover_letter'].startswith('uploads/')
    with public_disk.open(data['cover_letter']) as stored:
        assert stored.read() == b'Dear hiring manager'


def test_no_auto_upload_when_disabled_on_instance(client, make_image, disks):
    response = client.post('/test/users-auto-upload-disabled', {
        **USER_DATA,
        'avatar': make_image('avatar.jpg'),
        'cover': make_image('cover.jpg'),
    })

    data = response.json()
    assert data['avatar'] is None
    assert data['cover'] is None
    assert not (disks / 'public').exists()


def test_request_is_released_after_response(client):
    client.post('/test/users', USER_DATA)

    assert get_current_request() is None


def test_auto_uploads_images_under_asgi(async_client, make_image, public_disk):
    post = async_to_sync(async_client.post)

    response = post('/test/users', {**USER_DATA, 'avatar': make_image('avatar.jpg')})

    assert response.status_code == 201
    data = response.json()
    assert public_disk.exists(data['avatar'])
    assert get_current_request() is None


def test_global_setting_disables_auto_upload(settings, rf, make_image):
    settings.IMAGEUP = {**settings.IMAGEUP, 'auto_upload_images': False}
    user = User(**USER_DATA)
    user.set_images_field(['avatar'])

    with use_request(rf.post('/users', {'avatar': make_image()})):
        user.save()

    assert User.objects.get(pk=user.pk).avatar is None


def test_model_attribute_overrides_global_setting(rf, make_image):
    user = ModelPathUser(**USER_DATA)

    with use_request(rf.post('/users', {'avatar': make_image()})):
        user.save()

    assert user.avatar is None


def test_auto_upload_accepts_explicit_request(rf, make_image, public_disk):
    user = User.objects.create(**USER_DATA)
    user.set_images_field({'avatar': {'file_input': 'photo'}})

    user.auto_upload(rf.post('/users', {'photo': make_image()}))

    assert public_disk.exists(User.objects.get(pk=user.pk).avatar)


def test_auto_upload_errors_stop_remaining_fields(rf, make_image, make_file):
    user = User(**USER_DATA)
    user.set_images_field([
        {'avatar': {'rules': 'image'}},
        'cover',
    ])
    request = rf.post('/users', {'avatar': make_file(), 'cover': make_image()})

    with use_request(request), pytest.raises(ValidationFailed):
        user.save()

    reloaded = User.objects.get(pk=user.pk)
    assert reloaded.avatar is None
    assert reloaded.cover is None


def test_enable_auto_upload_after_disabling(rf, make_image, public_disk):
    user = User(**USER_DATA)
    user.set_images_field(['avatar'])
    user.disable_auto_upload().enable_auto_upload()

    with use_request(rf.post('/users', {'avatar': make_image()})):
        user.save()

    assert public_disk.exists(user.avatar)
