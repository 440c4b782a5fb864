from flask import Blueprint, current_app, jsonify

from codeduel.problems import list_problems

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the CodeDuel server!'})


@main.route('/api/health')
def health():
    """Report whether the code execution service answers."""
    judge = current_app.extensions['codeduel'].judge
    checker = getattr(judge, 'is_healthy', None)
    judge_ok = bool(checker()) if checker else True
    return jsonify({'status': 'ok', 'judge': 'ok' if judge_ok else 'unreachable'}), 200 if judge_ok else 503


@main.route('/api/problems')
def problems():
    return jsonify([p.to_dict() for p in list_problems()])


@main.route('/api/stats')
def stats():
    return jsonify(current_app.extensions['codeduel'].stats())
