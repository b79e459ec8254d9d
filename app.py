import hmac
from functools import wraps

from flask import Flask, request, redirect, jsonify
from werkzeug.exceptions import HTTPException

import layout
from blobstore import BlobStore
from config import Config
from errors import PortalError, MissingField, InvalidFormat, NotFound, StoreFailure
from validation import decode_submission, decode_json_submission, validate

app = Flask(__name__)
app.config.from_object(Config)

# Vercel Blob client; tests swap in their own store here
app.extensions['blob_store'] = BlobStore.from_config(app.config)


def get_store():
    return app.extensions['blob_store']


@app.after_request
def add_cors_headers(response):
    response.headers['Access-Control-Allow-Origin'] = app.config['CORS_ORIGIN']
    response.headers['Access-Control-Allow-Headers'] = 'Authorization, Content-Type'
    response.headers['Access-Control-Allow-Methods'] = 'GET, POST, OPTIONS'
    return response


def check_credentials(auth):
    if auth is None or auth.type != 'basic':
        return False
    username = (auth.username or '').encode('utf-8')
    password = (auth.password or '').encode('utf-8')
    admin_username = app.config['ADMIN_USERNAME'].encode('utf-8')
    admin_password = app.config['ADMIN_PASSWORD'].encode('utf-8')
    # Evaluate both so the response time does not tell which one was wrong
    username_ok = hmac.compare_digest(username, admin_username)
    password_ok = hmac.compare_digest(password, admin_password)
    return username_ok and password_ok


def admin_required(view):
    """Gate a view behind HTTP basic auth with the admin credentials."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not check_credentials(request.authorization):
            response = jsonify({'message': 'Unauthorized'})
            response.status_code = 401
            response.headers['WWW-Authenticate'] = 'Basic realm="Authorization Required"'
            return response
        return view(*args, **kwargs)
    return wrapped


# Routes
@app.route('/')
def index():
    return jsonify({'message': 'Server is up and running!'})


@app.route('/submit', methods=['POST'])
def submit():
    print(f"Received /submit request from: {request.remote_addr} Origin: {request.headers.get('Origin')}")

    # Rejected uploads propagate to the error handlers
    if request.is_json:
        submission = decode_json_submission(request.get_json(silent=True))
    else:
        submission = decode_submission(request.form, request.files,
                                       app.config['MAX_FILE_SIZE'])

    try:
        student_id = validate(submission)
    except (MissingField, InvalidFormat) as e:
        return jsonify({'message': e.message}), 400

    try:
        layout.persist(get_store(), student_id, submission)
    except StoreFailure as e:
        print(f"✗ Submission error for {student_id}: {e.message}")
        return jsonify({
            'message': 'Error submitting application',
            'error': e.message,
        }), 500

    print(f"✓ Application stored for {student_id} ({len(submission.attachments)} file(s))")
    return jsonify({
        'message': 'Application submitted successfully!',
        'studentId': student_id,
    })


@app.route('/students')
@admin_required
def list_students():
    try:
        students = layout.list_applicants(get_store())
    except StoreFailure as e:
        print(f"✗ Error fetching students: {e.message}")
        return jsonify({'message': 'Error fetching students'}), 500
    return jsonify({'students': students})


@app.route('/students/<student_id>')
@admin_required
def view_student(student_id):
    try:
        record = layout.get_applicant(get_store(), student_id)
    except NotFound as e:
        return jsonify({'message': e.message}), 404
    except StoreFailure as e:
        print(f"✗ Error fetching student {student_id}: {e.message}")
        return jsonify({'message': 'Error fetching student data'}), 500
    return jsonify(record.to_dict())


@app.route('/students/<student_id>/files/<filename>')
@admin_required
def student_file(student_id, filename):
    try:
        url = layout.get_file(get_store(), student_id, filename)
    except NotFound as e:
        return jsonify({'message': e.message}), 404
    except StoreFailure as e:
        print(f"✗ Error fetching file {student_id}/{filename}: {e.message}")
        return jsonify({'message': 'Error fetching file'}), 500
    return redirect(url)


# Error handlers
@app.errorhandler(PortalError)
def portal_error(e):
    if e.status < 500:
        print(f"✗ Request rejected: {e.message}")
        return jsonify({'message': e.message}), e.status
    print(f"✗ General error: {e.message}")
    return jsonify({'message': 'Server error', 'error': e.message}), e.status


@app.errorhandler(HTTPException)
def http_error(e):
    if e.code == 404:
        return jsonify({'message': 'Route not found'}), 404
    return jsonify({'message': e.description}), e.code


@app.errorhandler(Exception)
def server_error(e):
    print(f"✗ General error: {e}")
    return jsonify({'message': 'Server error', 'error': str(e)}), 500


# Entry point
if __name__ == '__main__':
    print("\n" + "=" * 60)
    print("ADMISSION FORM SERVICE")
    print("=" * 60)
    print(f"Blob store: {app.config['BLOB_API_URL']}")
    print(f"Blob token: {'✓' if app.config['BLOB_READ_WRITE_TOKEN'] else '✗'}")
    print("=" * 60 + "\n")
    app.run(host='0.0.0.0', port=app.config['PORT'])
