from typing import Any

from canvaslms.api.base_api import BaseApi
from canvaslms.models.course import Course
from canvaslms.models.file import File
from canvaslms.models.folder import Folder
from canvaslms.utils.pagination import ResultStream
from canvaslms.utils.streams import ErrorPolicy, TypedStream
from canvaslms.utils.validation import validate_id


class CourseApi(BaseApi):

    async def get_course(self, course_id: int) -> Course:
        """
        Gets a course by id.
        https://canvas.instructure.com/doc/api/courses.html#method.courses.show

        :param course_id: Course id
        :return: The hydrated course
        """
        validate_id(course_id, 'course_id')
        json_response = await self._client.get(f'courses/{course_id}')
        return Course(**json_response)

    def files(self, course_id: int, query: Any = None, on_error: ErrorPolicy | None = None) -> TypedStream[File]:
        """
        Streams every file in a course. Pages are fetched concurrently, so files
        arrive in no particular order.
        https://canvas.instructure.com/doc/api/files.html#method.files.api_index

        :param course_id: Course id
        :param query: Extra query parameters, e.g. {'content_types[]': 'image'}
        :param on_error: Error policy for this stream, defaults to the api's policy
        :return: Async iterator of files
        """
        validate_id(course_id, 'course_id')
        return self._stream(f'courses/{course_id}/files', File, query, on_error)

    def folders(self, course_id: int, query: Any = None, on_error: ErrorPolicy | None = None) -> TypedStream[Folder]:
        """
        Streams every folder in a course.
        https://canvas.instructure.com/doc/api/files.html#method.folders.list_all_folders

        :param course_id: Course id
        :param query: Extra query parameters
        :param on_error: Error policy for this stream, defaults to the api's policy
        :return: Async iterator of folders
        """
        validate_id(course_id, 'course_id')
        return self._stream(f'courses/{course_id}/folders', Folder, query, on_error)

    async def files_stream(self, course_id: int, query: Any = None) -> ResultStream[File]:
        """
        Starts fetching a course's files and returns the raw result stream, so
        the caller can read files and per-page errors separately.

        :param course_id: Course id
        :param query: Extra query parameters
        :return: Stream of files and errors
        """
        validate_id(course_id, 'course_id')
        return await self._paginate(f'courses/{course_id}/files', File, query).start()

    async def list_files(self, course_id: int, query: Any = None) -> list[File]:
        """
        Gets every file in a course. Fails if any page fails.

        :param course_id: Course id
        :param query: Extra query parameters
        :return: All the course's files
        """
        validate_id(course_id, 'course_id')
        return await self._paginate(f'courses/{course_id}/files', File, query).collect()

    async def list_folders(self, course_id: int, query: Any = None) -> list[Folder]:
        """
        Gets every folder in a course. Fails if any page fails.

        :param course_id: Course id
        :param query: Extra query parameters
        :return: All the course's folders
        """
        validate_id(course_id, 'course_id')
        return await self._paginate(f'courses/{course_id}/folders', Folder, query).collect()
