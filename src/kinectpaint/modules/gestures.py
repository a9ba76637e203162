from kinectpaint.core.frame_data import HAND_LEFT, HAND_RIGHT, HEAD
from kinectpaint.modules.skeleton import distance


def hands_together(skeleton, max_distance_m):
    left, right = skeleton.joint(HAND_LEFT), skeleton.joint(HAND_RIGHT)
    if left is None or right is None:
        return False
    return distance(left, right) < max_distance_m


def hands_above_head(skeleton, mapper):
    """Both hands above the head, compared as depth-image rows (smaller row is higher)."""
    head = skeleton.joint(HEAD)
    left, right = skeleton.joint(HAND_LEFT), skeleton.joint(HAND_RIGHT)
    if head is None or left is None or right is None:
        return False

    head_px = mapper.map_skeleton_point_to_depth_point(head)
    left_px = mapper.map_skeleton_point_to_depth_point(left)
    right_px = mapper.map_skeleton_point_to_depth_point(right)
    if head_px is None or left_px is None or right_px is None:
        return False
    return left_px[1] < head_px[1] and right_px[1] < head_px[1]


def is_erase_gesture(skeleton, mapper, max_distance_m=0.3):
    return hands_together(skeleton, max_distance_m) and hands_above_head(skeleton, mapper)
